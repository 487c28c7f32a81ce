"""
Django base settings for the wedding planner API.
"""
import os
from pathlib import Path
from datetime import timedelta
import environ

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Initialize environment variables
env = environ.Env(
    DEBUG=(bool, False)
)

# Read .env file
environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env('SECRET_KEY')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env('DEBUG')

ALLOWED_HOSTS = env.list('ALLOWED_HOSTS', default=[])

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third-party apps
    'rest_framework',
    'corsheaders',
    'django_filters',
    'drf_spectacular',
    'django_celery_beat',
    'django_celery_results',

    # Local apps
    'apps.core',
    'apps.authentication',
    'apps.vendors',
    'apps.couples',
    'apps.listings',
    'apps.schedules',
    'apps.projects',
    'apps.venue_designs',
    'apps.bookings',
    'apps.payments',
    'apps.budgets',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# Database
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': env('DB_NAME'),
        'USER': env('DB_USER'),
        'PASSWORD': env('DB_PASSWORD'),
        'HOST': env('DB_HOST'),
        'PORT': env('DB_PORT'),
    }
}

# Custom User Model
AUTH_USER_MODEL = 'authentication.User'

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# Media files
MEDIA_URL = 'media/'
MEDIA_ROOT = BASE_DIR / 'media'

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# REST Framework Configuration
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'apps.authentication.auth_backends.JWTAuthentication',  # Bearer token or auth cookie
        'apps.authentication.auth_backends.UserIdHeaderAuthentication',  # Swagger dev auth
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_PAGINATION_CLASS': 'apps.core.pagination.StandardResultsSetPagination',
    'PAGE_SIZE': 20,
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.SearchFilter',
        'rest_framework.filters.OrderingFilter',
    ],
    'DEFAULT_SCHEMA_CLASS': 'apps.core.schema.CustomAutoSchema',
    'EXCEPTION_HANDLER': 'apps.core.exceptions.custom_exception_handler',
}

# DRF Spectacular (API Documentation)
SPECTACULAR_SETTINGS = {
    'TITLE': 'Wedding Planner API',
    'DESCRIPTION': 'Wedding planning marketplace: vendor listings, 3D venue design, bookings, payments and budgets.',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
    'TAGS': [
        {'name': 'Authentication', 'description': 'Current user endpoints'},
        {'name': 'System', 'description': 'System health and status'},
        {'name': 'Listings - Public', 'description': 'Service listing browsing'},
        {'name': 'Listings - Vendor', 'description': 'Vendor listings, availability overrides and 3D models'},
        {'name': 'Schedules - Vendor', 'description': 'Vendor calendar and time off'},
        {'name': 'Availability', 'description': 'Availability checking'},
        {'name': 'Projects', 'description': 'Couple wedding projects'},
        {'name': 'Venue Designs', 'description': '3D venue design'},
        {'name': 'Venue Designs - Elements', 'description': 'Placed elements'},
        {'name': 'Venue Designs - Catalog', 'description': 'Catalog and availability on the wedding date'},
        {'name': 'Venue Designs - Tables', 'description': 'Table counts and per-table service tags'},
        {'name': 'Venue Designs - Checkout', 'description': 'What is left to book'},
        {'name': 'Bookings', 'description': 'Booking requests and cancellations'},
        {'name': 'Bookings - Vendor', 'description': 'Vendor booking management'},
        {'name': 'Bookings - Payments', 'description': 'Deposit, final and cancellation fee payments'},
        {'name': 'Budgets', 'description': 'Project budget'},
        {'name': 'Budgets - Categories', 'description': 'Budget categories'},
        {'name': 'Budgets - Expenses', 'description': 'Budget expenses'},
    ],
    'APPEND_COMPONENTS': {
        'securitySchemes': {
            'BearerAuth': {
                'type': 'http',
                'scheme': 'bearer',
                'bearerFormat': 'JWT',
                'description': 'JWT access token from the Authorization header'
            },
            'UserIdAuth': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'X-User-ID',
                'description': 'Development/Testing: enter a user id'
            }
        }
    },
    'SECURITY': [
        {'BearerAuth': []},
        {'UserIdAuth': []}
    ],
    'ENUM_NAME_OVERRIDES': {
        'BookingStatusEnum': 'apps.core.utils.constants.BOOKING_STATUSES',
        'ProjectStatusEnum': 'apps.core.utils.constants.PROJECT_STATUSES',
    },
}

# CORS Configuration
CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[])
CORS_ALLOW_CREDENTIALS = True

# JWT Configuration
JWT_SECRET_KEY = env('JWT_SECRET_KEY')
JWT_ALGORITHM = env('JWT_ALGORITHM', default='HS256')
JWT_COOKIE_NAME = env('JWT_COOKIE_NAME', default='token')
JWT_ACCESS_TOKEN_LIFETIME = timedelta(hours=env.int('JWT_ACCESS_TOKEN_HOURS', default=24))

# X-User-ID header authentication, for Swagger in development only
ALLOW_USER_ID_HEADER_AUTH = env.bool('ALLOW_USER_ID_HEADER_AUTH', default=False)

# Frontend URL used in notification emails
FRONTEND_URL = env('FRONTEND_URL', default='http://localhost:3000')

# Booking lifecycle
BOOKING_DEPOSIT_DUE_DAYS = env.int('BOOKING_DEPOSIT_DUE_DAYS', default=7)
BOOKING_FINAL_PAYMENT_LEAD_DAYS = env.int('BOOKING_FINAL_PAYMENT_LEAD_DAYS', default=14)
BOOKING_FINAL_DUE_DAYS_BEFORE = env.int('BOOKING_FINAL_DUE_DAYS_BEFORE', default=7)
BOOKING_REMINDER_DAYS_BEFORE_DUE = env.int('BOOKING_REMINDER_DAYS_BEFORE_DUE', default=3)
BOOKING_DEPOSIT_PERCENTAGE = env.float('BOOKING_DEPOSIT_PERCENTAGE', default=0.30)

# Redis Configuration
REDIS_URL = env('REDIS_URL')
CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        }
    }
}

# Session Configuration
SESSION_ENGINE = 'django.contrib.sessions.backends.cache'
SESSION_CACHE_ALIAS = 'default'

# Celery Configuration
CELERY_BROKER_URL = REDIS_URL
CELERY_RESULT_BACKEND = REDIS_URL
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

# Email Configuration - SMTP
EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = env('EMAIL_HOST', default='smtp.mailgun.org')
EMAIL_PORT = env.int('EMAIL_PORT', default=587)
EMAIL_USE_TLS = env.bool('EMAIL_USE_TLS', default=True)
EMAIL_HOST_USER = env('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = env('EMAIL_HOST_PASSWORD', default='')
DEFAULT_FROM_EMAIL = env('DEFAULT_FROM_EMAIL', default='Wedding Planner <noreply@weddingplanner.app>')

# Logging Configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
