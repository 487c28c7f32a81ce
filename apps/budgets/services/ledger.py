"""
Budget ledger: budgets, categories and expenses owned by a couple.

Every write ends with a full recompute so total_spent, planned_spend and
total_remaining always match the ledger and the design.
"""
import logging
from decimal import Decimal

from django.db import transaction
from rest_framework.exceptions import NotFound

from apps.budgets.models import Budget, BudgetCategory, Expense
from apps.core.exceptions import ResourceConflict
from apps.projects.models import WeddingProject
from .reconciliation import recompute_planned_spend, recompute_totals

logger = logging.getLogger(__name__)


class BudgetLedgerService:

    @staticmethod
    def recalculate(budget: Budget) -> Budget:
        if recompute_planned_spend(budget.project_id) is None:
            # recompute failed and was logged; ledger totals only
            recompute_totals(budget)
        budget.refresh_from_db()
        return budget

    @staticmethod
    def self_heal(budget: Budget) -> Budget:
        """
        Rebuild the design's placementsMeta mirror from its rows, then
        re-derive every budget figure.
        """
        from apps.venue_designs.models import VenueDesign
        from apps.venue_designs.services.design_service import venue_design_service

        design = VenueDesign.objects.filter(project_id=budget.project_id).first()
        if design is not None:
            venue_design_service.rebuild_placements_meta(design)
        return BudgetLedgerService.recalculate(budget)

    # Budgets

    @staticmethod
    def get_project(project_id, couple) -> WeddingProject:
        try:
            return WeddingProject.objects.get(id=project_id, couple=couple)
        except (WeddingProject.DoesNotExist, ValueError):
            raise NotFound('Project not found')

    @staticmethod
    def get_budget(budget_id, couple) -> Budget:
        try:
            return Budget.objects.select_related('project').get(id=budget_id, project__couple=couple)
        except (Budget.DoesNotExist, ValueError):
            raise NotFound('Budget not found')

    @staticmethod
    def get_or_create_for_project(project: WeddingProject) -> Budget:
        budget, created = Budget.objects.get_or_create(
            project=project,
            defaults={'total_budget': Decimal('0.00')}
        )
        if created:
            logger.info(f"Created empty budget {budget.id} for project {project.id}")
            return BudgetLedgerService.recalculate(budget)
        return budget

    @staticmethod
    def create_budget(project: WeddingProject, total_budget) -> Budget:
        if Budget.objects.filter(project=project).exists():
            raise ResourceConflict('Budget already exists for this project')
        budget = Budget.objects.create(project=project, total_budget=total_budget)
        logger.info(f"Created budget {budget.id} for project {project.id}")
        return BudgetLedgerService.recalculate(budget)

    @staticmethod
    def update_budget(budget: Budget, total_budget) -> Budget:
        budget.total_budget = total_budget
        budget.save(update_fields=['total_budget', 'updated_at'])
        return BudgetLedgerService.recalculate(budget)

    # Categories

    @staticmethod
    def get_category(budget: Budget, category_id) -> BudgetCategory:
        try:
            return BudgetCategory.objects.get(id=category_id, budget=budget)
        except (BudgetCategory.DoesNotExist, ValueError):
            raise NotFound('Category not found')

    @staticmethod
    def add_category(budget: Budget, category_name: str) -> BudgetCategory:
        category = BudgetCategory.objects.create(budget=budget, category_name=category_name)
        BudgetLedgerService.recalculate(budget)
        return category

    @staticmethod
    def rename_category(category: BudgetCategory, category_name: str) -> BudgetCategory:
        category.category_name = category_name
        category.save(update_fields=['category_name', 'updated_at'])
        return category

    @staticmethod
    def delete_category(category: BudgetCategory):
        budget = category.budget
        with transaction.atomic():
            category.delete()
        BudgetLedgerService.recalculate(budget)

    # Expenses

    @staticmethod
    def get_expense(category: BudgetCategory, expense_id) -> Expense:
        try:
            return Expense.objects.get(id=expense_id, category=category)
        except (Expense.DoesNotExist, ValueError):
            raise NotFound('Expense not found')

    @staticmethod
    def add_expense(category: BudgetCategory, data: dict) -> Expense:
        expense = Expense.objects.create(category=category, **data)
        logger.info(f"Added expense {expense.id} to budget {category.budget_id}")
        BudgetLedgerService.recalculate(category.budget)
        return expense

    @staticmethod
    def update_expense(expense: Expense, data: dict) -> Expense:
        for field, value in data.items():
            setattr(expense, field, value)
        expense.save()
        BudgetLedgerService.recalculate(expense.category.budget)
        return expense

    @staticmethod
    def delete_expense(expense: Expense):
        budget = expense.category.budget
        expense.delete()
        BudgetLedgerService.recalculate(budget)


budget_ledger_service = BudgetLedgerService()
