"""
Customer group lookups.

Operations receive the default-group lookup as an argument
(``get_default_group``) so callers can substitute their own.
"""

from django.core.exceptions import ValidationError

from apps.customers.exceptions import DefaultCustomerGroupError
from apps.customers.models import CustomerGroup


def get_default_customer_group() -> CustomerGroup:
    """
    Return the group flagged as default.

    Raises:
        DefaultCustomerGroupError: If no group or more than one group is flagged
    """
    groups = list(CustomerGroup.objects.default().order_by('id')[:2])

    if not groups:
        raise DefaultCustomerGroupError("No default customer group is configured")
    if len(groups) > 1:
        raise DefaultCustomerGroupError("More than one default customer group is configured")

    return groups[0]


def customer_group_exists(customer_group_id) -> bool:
    if customer_group_id in (None, ''):
        return False
    try:
        return CustomerGroup.objects.filter(id=customer_group_id).exists()
    except (TypeError, ValueError, ValidationError):
        return False
