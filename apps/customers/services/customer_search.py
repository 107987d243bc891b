"""Customer and customer group search and filtering service."""

from decimal import Decimal
from typing import Iterable, Optional

from django.db.models import Count, DecimalField, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce

from ..models import Customer, CustomerGroup


def search_customer_groups(
    *,
    name: Optional[str] = None,
    min_customer_count: Optional[int] = None,
    max_customer_count: Optional[int] = None,
    min_due_amount: Optional[Decimal] = None,
    max_due_amount: Optional[Decimal] = None
) -> QuerySet[CustomerGroup]:
    """
    Search and filter customer groups.

    Every group is annotated with `num_customers` and `due_amount_total`.

    Args:
        name: Case-insensitive substring of the group name
        min_customer_count: Minimum number of customers
        max_customer_count: Maximum number of customers
        min_due_amount: Minimum total due amount of the group's customers
        max_due_amount: Maximum total due amount of the group's customers

    Returns:
        Filtered QuerySet of CustomerGroup ordered by name
    """
    queryset = CustomerGroup.objects.annotate(
        num_customers=Count('customers'),
        due_amount_total=Coalesce(
            Sum('customers__due_amount'),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=12, decimal_places=2),
        ),
    )

    if name:
        queryset = queryset.filter(name__icontains=name.strip())

    if min_customer_count is not None:
        queryset = queryset.filter(num_customers__gte=min_customer_count)

    if max_customer_count is not None:
        queryset = queryset.filter(num_customers__lte=max_customer_count)

    if min_due_amount is not None:
        queryset = queryset.filter(due_amount_total__gte=min_due_amount)

    if max_due_amount is not None:
        queryset = queryset.filter(due_amount_total__lte=max_due_amount)

    return queryset.order_by('name')


def search_customers(
    *,
    search: Optional[str] = None,
    customer_group_ids: Optional[Iterable[int]] = None,
    is_active: Optional[bool] = None,
    is_withheld: Optional[bool] = None
) -> QuerySet[Customer]:
    """
    Search and filter customers.

    Args:
        search: Search term for name or mobile number
        customer_group_ids: Only customers in these groups
        is_active: Filter by active flag
        is_withheld: Filter by withheld flag

    Returns:
        QuerySet of Customer ordered by group name, then position
    """
    queryset = Customer.objects.select_related('customer_group')

    if search:
        term = search.strip()
        queryset = queryset.filter(Q(name__icontains=term) | Q(mobile_no__icontains=term))

    if customer_group_ids:
        queryset = queryset.filter(customer_group_id__in=list(customer_group_ids))

    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    if is_withheld is not None:
        queryset = queryset.filter(is_withheld=is_withheld)

    return queryset.order_by('customer_group__name', 'is_withheld', 'position', 'id')
