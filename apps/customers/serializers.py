from rest_framework import serializers
from .models import Customer, CustomerGroup


# =============================================================================
# Output serializers
# =============================================================================

class CustomerGroupMinimalSerializer(serializers.ModelSerializer):
    """Minimal group info for nested serialization."""

    class Meta:
        model = CustomerGroup
        fields = ['id', 'name', 'is_default']
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    """Main serializer for customers."""

    customer_group = CustomerGroupMinimalSerializer(read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id',
            'name',
            'email',
            'mobile_no',
            'address',
            'due_amount',
            'is_active',
            'is_withheld',
            'customer_group',
            'position',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CustomerGroupSerializer(serializers.ModelSerializer):
    """Main serializer for customer groups."""

    customer_count = serializers.SerializerMethodField()
    total_due_amount = serializers.SerializerMethodField()

    class Meta:
        model = CustomerGroup
        fields = [
            'id',
            'name',
            'is_default',
            'customer_count',
            'total_due_amount',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_customer_count(self, obj):
        """Use the search annotation when present."""
        count = getattr(obj, 'num_customers', None)
        return count if count is not None else obj.customers.count()

    def get_total_due_amount(self, obj):
        total = getattr(obj, 'due_amount_total', None)
        return str(total if total is not None else obj.total_due_amount())


# =============================================================================
# Input serializers
# =============================================================================

class CustomerPositionSerializer(serializers.Serializer):
    """One (customer, position) pair of a repositioning request."""

    customer_id = serializers.IntegerField()
    position = serializers.IntegerField()


class CustomerGroupCreateSerializer(serializers.Serializer):
    """Input for creating a customer group."""

    name = serializers.CharField(required=False, allow_blank=True, default='')
    is_default = serializers.BooleanField(required=False, default=False)
    customer_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )


class CustomerGroupUpdateSerializer(serializers.Serializer):
    """Input for the combined customer group edit."""

    name = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    customer_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )
    remove_customer_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )
    customer_positions = CustomerPositionSerializer(many=True, required=False, default=list)


class CustomerInputSerializer(serializers.Serializer):
    """
    Allow-list and type coercion for customer create/update.

    Presence and length rules are left to model validation so that
    failures come back in the operation's error list.
    """

    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    mobile_no = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    email = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    due_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    is_active = serializers.BooleanField(required=False, allow_null=True)
    is_withheld = serializers.BooleanField(required=False, allow_null=True)
    customer_group_id = serializers.IntegerField(required=False, allow_null=True)
    position = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class CustomerGroupFilterSerializer(serializers.Serializer):
    """Query parameters of the customer group list."""

    n = serializers.CharField(required=False)
    ccge = serializers.IntegerField(required=False, min_value=0)
    ccle = serializers.IntegerField(required=False, min_value=0)
    dage = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    dale = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class CustomerFilterSerializer(serializers.Serializer):
    """Query parameters of the customer list."""

    nom = serializers.CharField(required=False)
    cg_id = serializers.ListField(child=serializers.IntegerField(), required=False)
    act = serializers.BooleanField(required=False, allow_null=True, default=None)
    wh = serializers.BooleanField(required=False, allow_null=True, default=None)
