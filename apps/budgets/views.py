"""
Budget ledger views
"""
from rest_framework import viewsets, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse

from apps.core.permissions import IsCouple
from .models import Budget
from .serializers import (
    BudgetSerializer,
    BudgetCategorySerializer,
    ExpenseSerializer,
    BudgetCreateSerializer,
    BudgetUpdateSerializer,
    CategoryInputSerializer,
    ExpenseInputSerializer,
)
from .services.ledger import budget_ledger_service


def _couple_for(user):
    couple = getattr(user, 'couple_profile', None)
    if couple is None:
        raise PermissionDenied('Couple profile not found')
    return couple


def _budget_response(budget, status_code=status.HTTP_200_OK):
    budget = Budget.objects.prefetch_related('categories__expenses').select_related('project').get(pk=budget.pk)
    return Response(BudgetSerializer(budget).data, status=status_code)


class BudgetViewSet(viewsets.ViewSet):
    """
    A project's budget ledger: the budget, its categories and their
    expenses. Totals are recomputed after every write.
    """
    permission_classes = [IsAuthenticated, IsCouple]

    @extend_schema(
        summary="Get project budget",
        description="Budget of a project with categories and expenses. An empty budget is created on first access.",
        responses={
            200: BudgetSerializer,
            404: OpenApiResponse(description="Project not found")
        },
        tags=['Budgets']
    )
    def for_project(self, request, project_id=None):
        project = budget_ledger_service.get_project(project_id, _couple_for(request.user))
        budget = budget_ledger_service.get_or_create_for_project(project)
        return _budget_response(budget)

    @extend_schema(
        summary="Create budget",
        request=BudgetCreateSerializer,
        responses={
            201: BudgetSerializer,
            409: OpenApiResponse(description="Budget already exists for this project")
        },
        tags=['Budgets']
    )
    def create(self, request):
        serializer = BudgetCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        project = budget_ledger_service.get_project(data['project_id'], _couple_for(request.user))
        budget = budget_ledger_service.create_budget(project, data['total_budget'])
        return _budget_response(budget, status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update total budget",
        request=BudgetUpdateSerializer,
        responses={200: BudgetSerializer},
        tags=['Budgets']
    )
    def partial_update(self, request, pk=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        serializer = BudgetUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        budget = budget_ledger_service.update_budget(budget, serializer.validated_data['total_budget'])
        return _budget_response(budget)

    @extend_schema(
        summary="Recalculate budget",
        description="Re-derive planned spend, total spent and remaining from the ledger and the current design.",
        request=None,
        responses={200: BudgetSerializer},
        tags=['Budgets']
    )
    def recalculate(self, request, project_id=None):
        project = budget_ledger_service.get_project(project_id, _couple_for(request.user))
        budget = budget_ledger_service.get_or_create_for_project(project)
        budget = budget_ledger_service.self_heal(budget)
        return _budget_response(budget)

    @extend_schema(
        summary="Add category",
        request=CategoryInputSerializer,
        responses={201: BudgetCategorySerializer},
        tags=['Budgets - Categories']
    )
    def create_category(self, request, pk=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        serializer = CategoryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        category = budget_ledger_service.add_category(budget, serializer.validated_data['category_name'])
        return Response(BudgetCategorySerializer(category).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Rename category",
        request=CategoryInputSerializer,
        responses={200: BudgetCategorySerializer},
        tags=['Budgets - Categories']
    )
    def update_category(self, request, pk=None, category_id=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        category = budget_ledger_service.get_category(budget, category_id)
        serializer = CategoryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        category = budget_ledger_service.rename_category(category, serializer.validated_data['category_name'])
        return Response(BudgetCategorySerializer(category).data)

    @extend_schema(
        summary="Delete category",
        description="Deletes the category and all its expenses.",
        responses={204: None},
        tags=['Budgets - Categories']
    )
    def destroy_category(self, request, pk=None, category_id=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        category = budget_ledger_service.get_category(budget, category_id)
        budget_ledger_service.delete_category(category)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Add expense",
        request=ExpenseInputSerializer,
        responses={201: ExpenseSerializer},
        tags=['Budgets - Expenses']
    )
    def create_expense(self, request, pk=None, category_id=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        category = budget_ledger_service.get_category(budget, category_id)
        serializer = ExpenseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        expense = budget_ledger_service.add_expense(category, serializer.validated_data)
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update expense",
        request=ExpenseInputSerializer,
        responses={200: ExpenseSerializer},
        tags=['Budgets - Expenses']
    )
    def update_expense(self, request, pk=None, category_id=None, expense_id=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        category = budget_ledger_service.get_category(budget, category_id)
        expense = budget_ledger_service.get_expense(category, expense_id)
        serializer = ExpenseInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        expense = budget_ledger_service.update_expense(expense, serializer.validated_data)
        return Response(ExpenseSerializer(expense).data)

    @extend_schema(
        summary="Delete expense",
        responses={204: None},
        tags=['Budgets - Expenses']
    )
    def destroy_expense(self, request, pk=None, category_id=None, expense_id=None):
        budget = budget_ledger_service.get_budget(pk, _couple_for(request.user))
        category = budget_ledger_service.get_category(budget, category_id)
        expense = budget_ledger_service.get_expense(category, expense_id)
        budget_ledger_service.delete_expense(expense)
        return Response(status=status.HTTP_204_NO_CONTENT)
