"""
Budget serializers
"""
from rest_framework import serializers

from apps.listings.models import ServiceListing
from .models import Budget, BudgetCategory, Expense


class ExpenseSerializer(serializers.ModelSerializer):
    service_listing_id = serializers.UUIDField(source='service_listing.id', read_only=True, allow_null=True)
    booking_id = serializers.UUIDField(source='booking.id', read_only=True, allow_null=True)

    class Meta:
        model = Expense
        fields = [
            'id', 'expense_name', 'estimated_cost', 'actual_cost', 'remark',
            'service_listing_id', 'booking_id', 'from_3d_design', 'table_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class BudgetCategorySerializer(serializers.ModelSerializer):
    expenses = ExpenseSerializer(many=True, read_only=True)

    class Meta:
        model = BudgetCategory
        fields = ['id', 'category_name', 'expenses', 'created_at']
        read_only_fields = fields


class BudgetSerializer(serializers.ModelSerializer):
    """Budget with its categories and expenses"""
    project_id = serializers.UUIDField(source='project.id', read_only=True)
    categories = BudgetCategorySerializer(many=True, read_only=True)

    class Meta:
        model = Budget
        fields = [
            'id', 'project_id', 'total_budget', 'total_spent', 'planned_spend',
            'total_remaining', 'categories', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class BudgetSnapshotSerializer(serializers.ModelSerializer):
    """Budget figures without the ledger"""

    class Meta:
        model = Budget
        fields = ['id', 'total_budget', 'total_spent', 'planned_spend', 'total_remaining']
        read_only_fields = fields


class BudgetCreateSerializer(serializers.Serializer):
    project_id = serializers.UUIDField()
    total_budget = serializers.DecimalField(max_digits=12, decimal_places=2)

    def validate_total_budget(self, value):
        if value <= 0:
            raise serializers.ValidationError("Total budget must be positive")
        return value


class BudgetUpdateSerializer(serializers.Serializer):
    total_budget = serializers.DecimalField(max_digits=12, decimal_places=2)

    def validate_total_budget(self, value):
        if value <= 0:
            raise serializers.ValidationError("Total budget must be positive")
        return value


class CategoryInputSerializer(serializers.Serializer):
    category_name = serializers.CharField(
        max_length=100,
        error_messages={'blank': 'Category name is required', 'max_length': 'Category name is too long'}
    )


class ExpenseInputSerializer(serializers.Serializer):
    """Input serializer for creating/updating expenses"""
    expense_name = serializers.CharField(
        max_length=200,
        error_messages={'blank': 'Expense name is required', 'max_length': 'Expense name is too long'}
    )
    estimated_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    actual_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    remark = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    service_listing_id = serializers.PrimaryKeyRelatedField(
        queryset=ServiceListing.objects.all(),
        source='service_listing',
        required=False,
        allow_null=True
    )

    def validate_remark(self, value):
        return value or ''
