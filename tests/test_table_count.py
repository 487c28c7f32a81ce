import pytest

from apps.projects.models import ProjectService
from apps.venue_designs.services.design_service import venue_design_service
from apps.venue_designs.services.table_count import (
    TableTaggingError,
    get_table_count,
    get_tables,
    tag_tables,
    untag_tables,
)
from tests.conftest import _make_element, _make_listing

pytestmark = pytest.mark.django_db


@pytest.fixture
def tables(project, design, table_listing):
    placed = []
    for _ in range(3):
        placed.extend(venue_design_service.add_element(project, design, table_listing.id)['placements'])
    return placed


def test_table_detection(project, design, tables, vendor, chairs_listing):
    named = _make_listing(vendor, name='Sweetheart', design_element=_make_element(vendor, name='Sweetheart Table'))
    venue_design_service.add_element(project, design, named.id)
    venue_design_service.add_element(project, design, chairs_listing.id)

    assert len(get_tables(design)) == 4
    assert get_table_count(design) == 4


def test_tag_replaces_existing_tags(design, tables, linen_listing, vendor):
    runner = _make_listing(vendor, name='Table Runner', pricing_policy='per_table')
    ids = [t.id for t in tables]

    tag_tables(design, ids, [linen_listing.id])
    assert get_table_count(design, linen_listing.id) == 3

    tag_tables(design, ids[:1], [runner.id])
    assert get_table_count(design, linen_listing.id) == 2
    assert get_table_count(design, runner.id) == 1


def test_tagging_per_table_listing_adds_project_service(project, design, tables, linen_listing):
    tag_tables(design, [tables[0].id], [linen_listing.id])
    project_service = ProjectService.objects.get(project=project, service_listing=linen_listing)
    assert project_service.quantity == 0


def test_untag_only_removes_given_listings(design, tables, linen_listing, vendor):
    runner = _make_listing(vendor, name='Table Runner', pricing_policy='per_table')
    ids = [t.id for t in tables]
    tag_tables(design, ids, [linen_listing.id, runner.id])

    updated = untag_tables(design, ids[:2], [linen_listing.id])

    assert updated == 2
    assert get_table_count(design, linen_listing.id) == 1
    assert get_table_count(design, runner.id) == 3


def test_non_table_is_rejected(project, design, tables, chairs_listing, linen_listing):
    chair = venue_design_service.add_element(project, design, chairs_listing.id)['placements'][0]
    with pytest.raises(TableTaggingError, match='not tables'):
        tag_tables(design, [tables[0].id, chair.id], [linen_listing.id])


def test_unknown_ids_are_rejected(design, tables, linen_listing):
    with pytest.raises(TableTaggingError, match='not found'):
        tag_tables(design, ['00000000-0000-0000-0000-000000000000'], [linen_listing.id])
    with pytest.raises(TableTaggingError, match='service listings not found'):
        tag_tables(design, [tables[0].id], ['00000000-0000-0000-0000-000000000000'])


def test_empty_ids_are_rejected(design, tables, linen_listing):
    with pytest.raises(TableTaggingError):
        tag_tables(design, [], [linen_listing.id])
    with pytest.raises(TableTaggingError):
        untag_tables(design, [tables[0].id], [])
