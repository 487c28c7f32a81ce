from django.contrib import admin
from .models import Budget, BudgetCategory, Expense


class BudgetCategoryInline(admin.TabularInline):
    model = BudgetCategory
    extra = 0


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ['project', 'total_budget', 'total_spent', 'planned_spend', 'total_remaining']
    search_fields = ['project__project_name', 'project__couple__user__email']
    readonly_fields = ['total_spent', 'planned_spend', 'total_remaining']
    inlines = [BudgetCategoryInline]


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_name', 'category', 'estimated_cost', 'actual_cost', 'from_3d_design']
    search_fields = ['expense_name']
    list_filter = ['from_3d_design']
