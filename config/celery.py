"""
Celery application configuration for the wedding planner API.
"""
import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('weddingplanner')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

# Celery Beat Schedule for periodic tasks
app.conf.beat_schedule = {
    # Cancel bookings whose deposit or final payment is overdue
    'auto-cancel-overdue-bookings': {
        'task': 'bookings.auto_cancel_overdue_bookings',
        'schedule': crontab(hour=1, minute=0),
    },

    # Move confirmed bookings close to their date into final payment
    'open-final-payment-window': {
        'task': 'bookings.open_final_payment_window',
        'schedule': crontab(hour=2, minute=0),
    },

    # Remind couples of payments due soon
    'send-payment-reminders': {
        'task': 'bookings.send_payment_reminders',
        'schedule': crontab(hour=9, minute=0),
    },
}

app.conf.timezone = 'UTC'


@app.task(bind=True, ignore_result=True)
def debug_task(self):
    """Debug task to verify Celery is working."""
    print(f'Request: {self.request!r}')
