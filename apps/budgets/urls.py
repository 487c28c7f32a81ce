from django.urls import path
from . import views

app_name = 'budgets'

budget_create = views.BudgetViewSet.as_view({'post': 'create'})
budget_detail = views.BudgetViewSet.as_view({'patch': 'partial_update'})
budget_for_project = views.BudgetViewSet.as_view({'get': 'for_project'})
budget_recalculate = views.BudgetViewSet.as_view({'post': 'recalculate'})
category_list = views.BudgetViewSet.as_view({'post': 'create_category'})
category_detail = views.BudgetViewSet.as_view({'patch': 'update_category', 'delete': 'destroy_category'})
expense_list = views.BudgetViewSet.as_view({'post': 'create_expense'})
expense_detail = views.BudgetViewSet.as_view({'patch': 'update_expense', 'delete': 'destroy_expense'})

urlpatterns = [
    path('', budget_create, name='budget-create'),
    path('project/<uuid:project_id>/', budget_for_project, name='budget-for-project'),
    path('project/<uuid:project_id>/recalculate/', budget_recalculate, name='budget-recalculate'),
    path('<uuid:pk>/', budget_detail, name='budget-detail'),
    path('<uuid:pk>/categories/', category_list, name='category-list'),
    path('<uuid:pk>/categories/<uuid:category_id>/', category_detail, name='category-detail'),
    path('<uuid:pk>/categories/<uuid:category_id>/expenses/', expense_list, name='expense-list'),
    path(
        '<uuid:pk>/categories/<uuid:category_id>/expenses/<uuid:expense_id>/',
        expense_detail,
        name='expense-detail'
    ),
]
