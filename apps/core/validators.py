"""
Custom validators
"""
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
import re


def validate_phone_number(value):
    """
    Validate phone number format
    """
    phone_regex = re.compile(r'^\+?1?\d{9,15}$')
    if not phone_regex.match(value):
        raise ValidationError(
            _('Phone number must be entered in the format: "+999999999". Up to 15 digits allowed.')
        )


def validate_positive_decimal(value):
    """
    Validate that decimal is positive
    """
    if value <= 0:
        raise ValidationError(
            _('Value must be greater than zero.')
        )


def validate_non_negative_decimal(value):
    """
    Validate that decimal is zero or positive
    """
    if value < 0:
        raise ValidationError(
            _('Value cannot be negative.')
        )


def validate_cancellation_fee_tiers(value):
    """
    Validate a cancellation fee tier map such as {">90": 0, "60-90": 0.3}
    """
    if value in (None, ''):
        return
    if not isinstance(value, dict):
        raise ValidationError(_('Cancellation fee tiers must be an object.'))

    allowed = {'>90', '60-90', '30-59', '7-29', '<7'}
    unknown = set(value) - allowed
    if unknown:
        raise ValidationError(
            _('Unknown cancellation fee tiers: %(tiers)s'),
            params={'tiers': ', '.join(sorted(unknown))},
        )
    for key, pct in value.items():
        if not isinstance(pct, (int, float)) or pct < 0 or pct > 1:
            raise ValidationError(
                _('Tier %(tier)s must be a fraction between 0 and 1.'),
                params={'tier': key},
            )
