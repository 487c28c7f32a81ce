"""
Wedding project service
"""
import logging

from django.db import transaction

from apps.budgets.models import Budget
from apps.budgets.services.reconciliation import recompute_planned_spend, venue_is_booked
from apps.core.exceptions import BookingLocked

logger = logging.getLogger(__name__)


class WeddingProjectService:
    """
    Project lifecycle: create with an optional budget, update with the
    venue guarded while it is booked.
    """

    @staticmethod
    def create_project(couple, data: dict):
        from .models import WeddingProject

        data = dict(data)
        total_budget = data.pop('total_budget', None)

        with transaction.atomic():
            project = WeddingProject.objects.create(couple=couple, **data)
            if total_budget is not None:
                Budget.objects.create(
                    project=project,
                    total_budget=total_budget,
                    total_remaining=total_budget,
                )

        logger.info(f"Created project {project.id} for couple {couple.id}")
        if total_budget is not None:
            transaction.on_commit(lambda: recompute_planned_spend(project.id))
        return project

    @staticmethod
    def update_project(project, data: dict):
        data = dict(data)
        total_budget = data.pop('total_budget', None)

        if 'venue_service_listing' in data:
            new_venue = data['venue_service_listing']
            new_venue_id = new_venue.id if new_venue is not None else None
            if new_venue_id != project.venue_service_listing_id and venue_is_booked(project):
                raise BookingLocked('The current venue is booked and cannot be changed')

        with transaction.atomic():
            for field, value in data.items():
                setattr(project, field, value)
            project.save()

            if total_budget is not None:
                budget, created = Budget.objects.get_or_create(
                    project=project,
                    defaults={'total_budget': total_budget, 'total_remaining': total_budget}
                )
                if not created:
                    budget.total_budget = total_budget
                    budget.save(update_fields=['total_budget', 'updated_at'])

        transaction.on_commit(lambda: recompute_planned_spend(project.id))
        return project


wedding_project_service = WeddingProjectService()
