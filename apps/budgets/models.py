"""
Budget ledger models
"""
from decimal import Decimal

from django.db import models

from apps.core.models import BaseModel
from apps.core.validators import validate_non_negative_decimal, validate_positive_decimal


class Budget(BaseModel):
    """
    A project's budget.

    total_spent is the sum of actual costs, planned_spend is derived from the
    current design, and total_remaining = total_budget - total_spent - planned_spend.
    """
    project = models.OneToOneField(
        'projects.WeddingProject',
        on_delete=models.CASCADE,
        related_name='budget'
    )

    total_budget = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[validate_positive_decimal]
    )
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_remaining = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    planned_spend = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        db_table = 'budgets'
        verbose_name = 'Budget'
        verbose_name_plural = 'Budgets'

    def __str__(self):
        return f"Budget for {self.project.project_name}: {self.total_budget}"


class BudgetCategory(BaseModel):
    budget = models.ForeignKey(
        Budget,
        on_delete=models.CASCADE,
        related_name='categories'
    )
    category_name = models.CharField(max_length=100)

    class Meta:
        db_table = 'budget_categories'
        verbose_name = 'Budget Category'
        verbose_name_plural = 'Budget Categories'
        ordering = ['created_at']

    def __str__(self):
        return self.category_name


class Expense(BaseModel):
    """
    A budget line. Expenses created from the 3D design carry the listing
    (and, for bookings, the booking) they stand for.
    """
    category = models.ForeignKey(
        BudgetCategory,
        on_delete=models.CASCADE,
        related_name='expenses'
    )

    expense_name = models.CharField(max_length=200)
    estimated_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[validate_non_negative_decimal]
    )
    actual_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[validate_non_negative_decimal]
    )
    remark = models.CharField(max_length=500, blank=True)

    service_listing = models.ForeignKey(
        'listings.ServiceListing',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )
    placed_element = models.ForeignKey(
        'venue_designs.PlacedElement',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )
    from_3d_design = models.BooleanField(default=False)
    # Tagged table count the estimate was last scaled to (per-table services)
    table_count = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = 'expenses'
        verbose_name = 'Expense'
        verbose_name_plural = 'Expenses'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['service_listing']),
            models.Index(fields=['booking']),
        ]

    def __str__(self):
        return f"{self.expense_name}: {self.estimated_cost}"
