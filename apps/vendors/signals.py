"""
Signals for Vendor app.
Auto-creates the Vendor profile when a User with role 'vendor' is created.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver
from apps.authentication.models import User
from .models import Vendor
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_vendor_profile(sender, instance, created, **kwargs):
    if created and instance.role == 'vendor':
        Vendor.objects.get_or_create(user=instance)
        logger.info(f"Created Vendor profile for user {instance.email}")
