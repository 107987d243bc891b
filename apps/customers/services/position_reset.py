"""
Position reset service.

Renumbers customers inside their groups so that each partition
(active and withheld) holds positions 1..N without gaps or duplicates.
"""

import logging
from typing import Iterable, Optional

from apps.customers.models import Customer, CustomerGroup

from .error_tracker import ErrorTracker, OperationResult

logger = logging.getLogger(__name__)

POSITION_UPDATE_ERROR = 'unable to update position for customers'


def reset_customer_positions(
    customer_group_ids: Iterable,
    error_tracker: Optional[ErrorTracker] = None
) -> OperationResult:
    """
    Recompute contiguous positions for every customer in the given groups.

    Customers keep their relative order, (position, id) ascending. Each
    position is written with a direct UPDATE, so model validation and the
    ordered-list hooks on Customer.save() do not run.

    A failed write adds an error and the loop carries on with the remaining
    customers.

    Args:
        customer_group_ids: Group ids; duplicates and None are ignored
        error_tracker: Shared tracker of the calling operation

    Returns:
        OperationResult with no payload
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('reset_customer_positions')

    group_ids = {group_id for group_id in customer_group_ids if group_id is not None}
    customer_groups = CustomerGroup.objects.filter(id__in=group_ids).order_by('id')

    for customer_group in customer_groups:
        for is_withheld in (False, True):
            _renumber_partition(customer_group, is_withheld, error_tracker)

    if error_tracker.has_error():
        return OperationResult.failed(error_tracker)

    return OperationResult.ok()


def _renumber_partition(customer_group, is_withheld, error_tracker):
    customer_ids = list(
        Customer.objects
        .in_partition(customer_group.id, is_withheld)
        .order_by('position', 'id')
        .values_list('id', flat=True)
    )

    for position, customer_id in enumerate(customer_ids, start=1):
        if not _write_position(customer_id, position):
            error_tracker.add(POSITION_UPDATE_ERROR)

    logger.debug(
        "Reset %d %s positions in customer group %s",
        len(customer_ids), 'withheld' if is_withheld else 'active', customer_group.id
    )


def _write_position(customer_id, position) -> bool:
    return Customer.objects.filter(pk=customer_id).update(position=position) == 1
