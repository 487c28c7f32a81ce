"""
Shared fixtures: users, vendors, listings, projects, designs and bookings.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.authentication.models import User
from apps.bookings.models import Booking, SelectedService
from apps.budgets.models import Budget
from apps.core.utils.constants import (
    AVAILABILITY_EXCLUSIVE,
    AVAILABILITY_QUANTITY_BASED,
    BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION,
    ELEMENT_TYPE_TABLE,
    PRICING_FIXED_PACKAGE,
    PRICING_PER_TABLE,
    PRICING_PER_UNIT,
    VENDOR_CATEGORY_OTHER,
    VENDOR_CATEGORY_VENUE,
)
from apps.core.utils.helpers import today
from apps.listings.models import DesignElement, ServiceListing
from apps.projects.models import WeddingProject
from apps.venue_designs.services.design_service import venue_design_service


def _make_user(email, role):
    return User.objects.create_user(email=email, password='secret-pass', role=role, first_name=email.split('@')[0])


def _make_vendor(email='vendor@example.com', category=VENDOR_CATEGORY_OTHER, business_name='Vendor Co'):
    user = _make_user(email, 'vendor')
    vendor = user.vendor_profile
    vendor.category = category
    vendor.business_name = business_name
    vendor.save()
    return vendor


def _make_couple(email='couple@example.com'):
    return _make_user(email, 'couple').couple_profile


def _make_element(vendor=None, name='Chair', element_type='', width=0.8, depth=0.8):
    return DesignElement.objects.create(
        vendor=vendor,
        name=name,
        element_type=element_type,
        model_file=f"/models/{name.lower().replace(' ', '_')}.glb",
        dimensions={'width': width, 'height': 1.0, 'depth': depth},
    )


def _make_listing(vendor, name='Service', **kwargs):
    defaults = {
        'category': VENDOR_CATEGORY_OTHER,
        'availability_type': AVAILABILITY_EXCLUSIVE,
        'pricing_policy': PRICING_FIXED_PACKAGE,
        'price': Decimal('100.00'),
    }
    defaults.update(kwargs)
    return ServiceListing.objects.create(vendor=vendor, name=name, **defaults)


def _make_project(couple, wedding_date=None, venue=None, name='Our Wedding'):
    return WeddingProject.objects.create(
        couple=couple,
        project_name=name,
        wedding_date=wedding_date,
        venue_service_listing=venue,
    )


def _make_booking(couple, vendor, reserved_date, lines, project=None, status=BOOKING_STATUS_PENDING_VENDOR_CONFIRMATION):
    """lines: [(listing, quantity, total_price)]"""
    booking = Booking.objects.create(
        couple=couple,
        vendor=vendor,
        project=project,
        reserved_date=reserved_date,
        status=status,
    )
    for listing, quantity, total in lines:
        SelectedService.objects.create(
            booking=booking,
            service_listing=listing,
            quantity=quantity,
            total_price=Decimal(str(total)),
        )
    return booking


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def couple(db):
    return _make_couple()


@pytest.fixture
def other_couple(db):
    return _make_couple('other@example.com')


@pytest.fixture
def vendor(db):
    return _make_vendor()


@pytest.fixture
def venue_vendor(db):
    return _make_vendor('venue@example.com', category=VENDOR_CATEGORY_VENUE, business_name='Grand Hall')


@pytest.fixture
def couple_client(couple):
    client = APIClient()
    client.force_authenticate(user=couple.user)
    return client


@pytest.fixture
def vendor_client(vendor):
    client = APIClient()
    client.force_authenticate(user=vendor.user)
    return client


@pytest.fixture
def wedding_date():
    return today() + timedelta(days=120)


@pytest.fixture
def venue_listing(venue_vendor):
    element = _make_element(venue_vendor, name='Grand Hall Floor', width=20, depth=20)
    return _make_listing(
        venue_vendor,
        name='Grand Hall',
        category=VENDOR_CATEGORY_VENUE,
        price=Decimal('5000.00'),
        design_element=element,
    )


@pytest.fixture
def exclusive_listing(vendor):
    return _make_listing(vendor, name='Photography Package', price=Decimal('1500.00'))


@pytest.fixture
def chairs_listing(vendor):
    element = _make_element(vendor, name='Chiavari Chair')
    return _make_listing(
        vendor,
        name='Chiavari Chairs',
        availability_type=AVAILABILITY_QUANTITY_BASED,
        max_quantity=10,
        pricing_policy=PRICING_PER_UNIT,
        price=Decimal('20.00'),
        design_element=element,
    )


@pytest.fixture
def table_listing(vendor):
    element = _make_element(vendor, name='Round Table', element_type=ELEMENT_TYPE_TABLE, width=1.5, depth=1.5)
    return _make_listing(
        vendor,
        name='Round Tables',
        availability_type=AVAILABILITY_QUANTITY_BASED,
        max_quantity=50,
        pricing_policy=PRICING_PER_UNIT,
        price=Decimal('40.00'),
        design_element=element,
    )


@pytest.fixture
def linen_listing(vendor):
    return _make_listing(
        vendor,
        name='Table Linen',
        availability_type=AVAILABILITY_QUANTITY_BASED,
        max_quantity=100,
        pricing_policy=PRICING_PER_TABLE,
        price=Decimal('15.00'),
    )


@pytest.fixture
def project(couple, wedding_date, venue_listing):
    return _make_project(couple, wedding_date=wedding_date, venue=venue_listing)


@pytest.fixture
def budget(project):
    return Budget.objects.create(project=project, total_budget=Decimal('20000.00'))


@pytest.fixture
def design(project):
    return venue_design_service.get_or_create_design(project)
