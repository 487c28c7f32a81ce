"""
Signals for Couple app.
Auto-creates the Couple profile when a User with role 'couple' is created.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver
from apps.authentication.models import User
from .models import Couple
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_couple_profile(sender, instance, created, **kwargs):
    if created and instance.role == 'couple':
        Couple.objects.get_or_create(user=instance)
        logger.info(f"Created Couple profile for user {instance.email}")
