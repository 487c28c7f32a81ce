"""
Wedding project models
"""
from django.db import models

from apps.core.models import BaseModel, BookableItemModel
from apps.core.utils.constants import PROJECT_STATUSES, PROJECT_STATUS_DRAFT, PROJECT_STATUS_COMPLETED
from apps.core.utils.helpers import today


class WeddingProject(BaseModel):
    """
    A couple's wedding plan: date, venue, 3D design, bookings and budget
    """
    couple = models.ForeignKey(
        'couples.Couple',
        on_delete=models.CASCADE,
        related_name='projects'
    )

    project_name = models.CharField(max_length=255)
    wedding_date = models.DateField(null=True, blank=True, db_index=True)
    event_start_time = models.DateTimeField(null=True, blank=True)
    event_end_time = models.DateTimeField(null=True, blank=True)

    venue_service_listing = models.ForeignKey(
        'listings.ServiceListing',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venue_projects'
    )

    status = models.CharField(
        max_length=20,
        choices=PROJECT_STATUSES,
        default=PROJECT_STATUS_DRAFT,
        db_index=True
    )

    class Meta:
        db_table = 'wedding_projects'
        verbose_name = 'Wedding Project'
        verbose_name_plural = 'Wedding Projects'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.project_name} ({self.couple})"

    @property
    def is_locked(self):
        """Completed projects and past weddings are read-only."""
        if self.status == PROJECT_STATUS_COMPLETED:
            return True
        return bool(self.wedding_date and self.wedding_date < today())


class ProjectService(BookableItemModel):
    """
    Non-3D line item of a project: a service with no 3D model, or a
    per-table service whose quantity comes from table tags.
    """
    project = models.ForeignKey(
        WeddingProject,
        on_delete=models.CASCADE,
        related_name='project_services'
    )
    service_listing = models.ForeignKey(
        'listings.ServiceListing',
        on_delete=models.CASCADE,
        related_name='project_services'
    )
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = 'project_services'
        verbose_name = 'Project Service'
        verbose_name_plural = 'Project Services'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['project', 'service_listing'],
                name='unique_project_service_listing'
            ),
        ]

    def __str__(self):
        return f"{self.project.project_name}: {self.quantity} x {self.service_listing.name}"
