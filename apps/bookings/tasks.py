"""
Celery tasks for bookings app.
"""
import logging
from contextlib import contextmanager
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

# Lock lifetime, long enough for one sweep
TASK_LOCK_TIMEOUT = 60 * 30


@contextmanager
def task_lock(name: str):
    """Yield True when this worker holds the lock for `name`."""
    key = f"task-lock:{name}"
    acquired = cache.add(key, 'locked', TASK_LOCK_TIMEOUT)
    try:
        yield acquired
    finally:
        if acquired:
            cache.delete(key)


@shared_task(name='bookings.auto_cancel_overdue_bookings')
def auto_cancel_overdue_bookings():
    """
    Cancel bookings whose deposit or final payment is past due.

    Runs daily. Each overdue booking moves to cancelled_by_vendor with a
    system cancellation record naming the missed payment.
    """
    from apps.bookings.models import Booking
    from apps.bookings.services.cancellation import cancel_booking
    from apps.core.utils.constants import (
        BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
        BOOKING_STATUS_PENDING_FINAL_PAYMENT,
        CANCELLED_BY_SYSTEM,
    )
    from apps.core.utils.helpers import today

    with task_lock('auto_cancel_overdue_bookings') as acquired:
        if not acquired:
            logger.info("Auto-cancel sweep already running, skipping")
            return {'skipped': True}

        current = today()
        overdue = [
            (BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT, 'deposit_due_date__lt', 'Deposit payment not received by due date'),
            (BOOKING_STATUS_PENDING_FINAL_PAYMENT, 'final_due_date__lt', 'Final payment not received by due date'),
        ]

        cancelled = 0
        failed = 0
        for status, due_lookup, reason in overdue:
            bookings = Booking.objects.filter(status=status, **{due_lookup: current})
            for booking in bookings:
                try:
                    cancel_booking(booking, CANCELLED_BY_SYSTEM, reason=reason)
                    cancelled += 1
                except Exception as e:
                    failed += 1
                    logger.error(f"Failed to auto-cancel booking {booking.id}: {e}")

        logger.info(f"Auto-cancelled {cancelled} overdue bookings ({failed} failed)")
        return {'cancelled': cancelled, 'failed': failed}


@shared_task(name='bookings.open_final_payment_window')
def open_final_payment_window():
    """
    Move confirmed bookings close to their date into pending_final_payment.
    """
    from apps.bookings.models import Booking
    from apps.bookings.services.state_machine import transition_booking, finalize_due_date
    from apps.core.utils.constants import (
        BOOKING_STATUS_CONFIRMED,
        BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    )
    from apps.core.utils.helpers import today

    with task_lock('open_final_payment_window') as acquired:
        if not acquired:
            logger.info("Final payment sweep already running, skipping")
            return {'skipped': True}

        horizon = today() + timedelta(days=settings.BOOKING_FINAL_PAYMENT_LEAD_DAYS)
        bookings = Booking.objects.filter(
            status=BOOKING_STATUS_CONFIRMED,
            reserved_date__lte=horizon,
        )

        opened = 0
        for booking in bookings:
            try:
                transition_booking(
                    booking,
                    BOOKING_STATUS_PENDING_FINAL_PAYMENT,
                    final_due_date=finalize_due_date(booking),
                )
                opened += 1
            except Exception as e:
                logger.error(f"Failed to open final payment for booking {booking.id}: {e}")

        logger.info(f"Opened final payment window for {opened} bookings")
        return {'opened': opened}


@shared_task(name='bookings.send_payment_reminders')
def send_payment_reminders():
    """
    Email couples whose deposit or final payment is due in
    BOOKING_REMINDER_DAYS_BEFORE_DUE days.
    """
    from apps.bookings.models import Booking
    from apps.core.utils.constants import (
        BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT,
        BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    )
    from apps.core.utils.helpers import today

    with task_lock('send_payment_reminders') as acquired:
        if not acquired:
            return {'skipped': True}

        due_on = today() + timedelta(days=settings.BOOKING_REMINDER_DAYS_BEFORE_DUE)
        stages = [
            (BOOKING_STATUS_PENDING_DEPOSIT_PAYMENT, 'deposit_due_date', 'deposit'),
            (BOOKING_STATUS_PENDING_FINAL_PAYMENT, 'final_due_date', 'final'),
        ]

        sent = 0
        for status, due_field, label in stages:
            bookings = Booking.objects.filter(
                status=status, **{due_field: due_on}
            ).select_related('couple__user', 'vendor')
            for booking in bookings:
                try:
                    send_payment_reminder_email.delay(
                        user_email=booking.couple.user.email,
                        user_name=booking.couple.user.full_name,
                        vendor_name=booking.vendor.display_name,
                        payment_label=label,
                        due_date=due_on.strftime("%B %d, %Y"),
                        reserved_date=booking.reserved_date.strftime("%B %d, %Y"),
                    )
                    sent += 1
                except Exception as e:
                    logger.error(f"Failed to queue reminder for booking {booking.id}: {e}")

        logger.info(f"Queued {sent} payment reminders for {due_on}")
        return {'sent': sent}


@shared_task(name='bookings.send_payment_reminder_email')
def send_payment_reminder_email(
    user_email: str,
    user_name: str,
    vendor_name: str,
    payment_label: str,
    due_date: str,
    reserved_date: str,
):
    """Send a payment due reminder."""
    from django.core.mail import send_mail

    subject = f'Payment Reminder - {vendor_name}'
    message = f"""
Hi {user_name},

Your {payment_label} payment for {vendor_name} (booked for {reserved_date}) is due on {due_date}.

Bookings with missed payments are cancelled automatically after the due date.

Thank you,
Wedding Planner Team
"""

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user_email],
            fail_silently=False,
        )
        logger.info(f"Sent {payment_label} reminder to {user_email}")
    except Exception as e:
        logger.error(f"Failed to send reminder email to {user_email}: {e}")


@shared_task(name='bookings.send_booking_status_email')
def send_booking_status_email(booking_id: str, status: str):
    """Tell the couple their booking changed status."""
    from django.core.mail import send_mail
    from apps.bookings.models import Booking

    try:
        booking = Booking.objects.select_related('couple__user', 'vendor').get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for status email")
        return

    user = booking.couple.user
    status_label = booking.get_status_display()
    subject = f'Booking Update - {booking.vendor.display_name}'
    message = f"""
Hi {user.full_name},

Your booking with {booking.vendor.display_name} for {booking.reserved_date.strftime("%B %d, %Y")} is now: {status_label}.

Thank you,
Wedding Planner Team
"""

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            fail_silently=False,
        )
        logger.info(f"Sent status email ({status}) for booking {booking_id}")
    except Exception as e:
        logger.error(f"Failed to send status email for booking {booking_id}: {e}")
