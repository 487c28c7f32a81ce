"""
Application-wide constants
"""

# User roles
USER_ROLE_COUPLE = 'couple'
USER_ROLE_VENDOR = 'vendor'
USER_ROLE_ADMIN = 'admin'

USER_ROLES = [
    (USER_ROLE_COUPLE, 'Couple'),
    (USER_ROLE_VENDOR, 'Vendor'),
    (USER_ROLE_ADMIN, 'Admin'),
]

# Vendor categories
VENDOR_CATEGORY_PHOTOGRAPHER = 'Photographer'
VENDOR_CATEGORY_VIDEOGRAPHER = 'Videographer'
VENDOR_CATEGORY_VENUE = 'Venue'
VENDOR_CATEGORY_CATERER = 'Caterer'
VENDOR_CATEGORY_FLORIST = 'Florist'
VENDOR_CATEGORY_DJ_MUSIC = 'DJ_Music'
VENDOR_CATEGORY_OTHER = 'Other'

VENDOR_CATEGORIES = [
    (VENDOR_CATEGORY_PHOTOGRAPHER, 'Photographer'),
    (VENDOR_CATEGORY_VIDEOGRAPHER, 'Videographer'),
    (VENDOR_CATEGORY_VENUE, 'Venue'),
    (VENDOR_CATEGORY_CATERER, 'Caterer'),
    (VENDOR_CATEGORY_FLORIST, 'Florist'),
    (VENDOR_CATEGORY_DJ_MUSIC, 'DJ / Music'),
    (VENDOR_CATEGORY_OTHER, 'Other'),
]

# Listing availability policies
AVAILABILITY_EXCLUSIVE = 'exclusive'
AVAILABILITY_REUSABLE = 'reusable'
AVAILABILITY_QUANTITY_BASED = 'quantity_based'

AVAILABILITY_TYPES = [
    (AVAILABILITY_EXCLUSIVE, 'Exclusive'),
    (AVAILABILITY_REUSABLE, 'Reusable'),
    (AVAILABILITY_QUANTITY_BASED, 'Quantity Based'),
]

# Listing pricing policies
PRICING_PER_UNIT = 'per_unit'
PRICING_PER_TABLE = 'per_table'
PRICING_FIXED_PACKAGE = 'fixed_package'
PRICING_TIME_BASED = 'time_based'

PRICING_POLICIES = [
    (PRICING_PER_UNIT, 'Per Unit'),
    (PRICING_PER_TABLE, 'Per Table'),
    (PRICING_FIXED_PACKAGE, 'Fixed Package'),
    (PRICING_TIME_BASED, 'Time Based'),
]

# Booking statuses
BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION = 'pending_vendor_confirmation'
BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT = 'pending_deposit_payment'
BOOKING_STATUS_CONFIRMED = 'confirmed'
BOOKING_STATUS_PENDING_FINAL_PAYMENT = 'pending_final_payment'
BOOKING_STATUS_COMPLETED = 'completed'
BOOKING_STATUS_REJECTED = 'rejected'
BOOKING_STATUS_CANCELLED_BY_COUPLE = 'cancelled_by_couple'
BOOKING_STATUS_CANCELLED_BY_VENDOR = 'cancelled_by_vendor'

BOOKING_STATUSES = [
    (BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION, 'Pending Vendor Confirmation'),
    (BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT, 'Pending Deposit Payment'),
    (BOOKING_STATUS_CONFIRMED, 'Confirmed'),
    (BOOKING_STATUS_PENDING_FINAL_PAYMENT, 'Pending Final Payment'),
    (BOOKING_STATUS_COMPLETED, 'Completed'),
    (BOOKING_STATUS_REJECTED, 'Rejected'),
    (BOOKING_STATUS_CANCELLED_BY_COUPLE, 'Cancelled by Couple'),
    (BOOKING_STATUS_CANCELLED_BY_VENDOR, 'Cancelled by Vendor'),
]

# Statuses that still hold the vendor's date and lock linked design items
ACTIVE_BOOKING_STATUSES = (
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    BOOKING_STATUS_COMPLETED,
)

CANCELLED_BOOKING_STATUSES = (
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
)

RELEASED_BOOKING_STATUSES = CANCELLED_BOOKING_STATUSES + (BOOKING_STATUS_REJECTED,)

# Time slot statuses
SLOT_STATUS_BOOKED = 'booked'
SLOT_STATUS_PERSONAL_TIME_OFF = 'personal_time_off'

SLOT_STATUSES = [
    (SLOT_STATUS_BOOKED, 'Booked'),
    (SLOT_STATUS_PERSONAL_TIME_OFF, 'Personal Time Off'),
]

# Project statuses
PROJECT_STATUS_DRAFT = 'draft'
PROJECT_STATUS_READY_TO_BOOK = 'ready_to_book'
PROJECT_STATUS_BOOKED = 'booked'
PROJECT_STATUS_COMPLETED = 'completed'

PROJECT_STATUSES = [
    (PROJECT_STATUS_DRAFT, 'Draft'),
    (PROJECT_STATUS_READY_TO_BOOK, 'Ready to Book'),
    (PROJECT_STATUS_BOOKED, 'Booked'),
    (PROJECT_STATUS_COMPLETED, 'Completed'),
]

# Payment types
PAYMENT_TYPE_DEPOSIT = 'deposit'
PAYMENT_TYPE_FINAL = 'final'
PAYMENT_TYPE_CANCELLATION_FEE = 'cancellation_fee'

PAYMENT_TYPES = [
    (PAYMENT_TYPE_DEPOSIT, 'Deposit'),
    (PAYMENT_TYPE_FINAL, 'Final'),
    (PAYMENT_TYPE_CANCELLATION_FEE, 'Cancellation Fee'),
]

# Payment methods
PAYMENT_METHOD_CREDIT_CARD = 'credit_card'
PAYMENT_METHOD_BANK_TRANSFER = 'bank_transfer'
PAYMENT_METHOD_TOUCH_N_GO = 'touch_n_go'

PAYMENT_METHODS = [
    (PAYMENT_METHOD_CREDIT_CARD, 'Credit Card'),
    (PAYMENT_METHOD_BANK_TRANSFER, 'Bank Transfer'),
    (PAYMENT_METHOD_TOUCH_N_GO, "Touch 'n Go"),
]

# Who cancelled a booking
CANCELLED_BY_COUPLE = 'couple'
CANCELLED_BY_VENDOR = 'vendor'
CANCELLED_BY_SYSTEM = 'system'

CANCELLED_BY_CHOICES = [
    (CANCELLED_BY_COUPLE, 'Couple'),
    (CANCELLED_BY_VENDOR, 'Vendor'),
    (CANCELLED_BY_SYSTEM, 'System'),
]

# Design element types
ELEMENT_TYPE_TABLE = 'table'

# Budget category holding expenses promoted from the 3D design
DESIGN_EXPENSE_CATEGORY_NAME = '3D Design'
