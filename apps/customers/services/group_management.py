"""
Customer group management service.

Creates, updates and deletes customer groups while keeping every customer
attached to a valid group and every group's positions dense. Each
operation runs in a single transaction and reports through an
ErrorTracker; any collected error rolls the whole operation back.
"""

import logging
from typing import Callable, Iterable, Mapping, Optional

from django.db import transaction
from django.db.models import ProtectedError

from apps.customers.exceptions import DefaultGroupDeletionError
from apps.customers.models import Customer, CustomerGroup

from .base import rollback, save_record
from .error_tracker import ErrorTracker, OperationResult
from .group_lookup import get_default_customer_group
from .position_reset import reset_customer_positions

logger = logging.getLogger(__name__)

ASSIGN_CUSTOMER_ERROR = 'Unable to assign customer to customer group.'
INVALID_POSITION_ERROR = 'Invalid position provided'
DELETE_DEFAULT_GROUP_ERROR = 'Cannot delete the default group.'


# =============================================================================
# Create
# =============================================================================

def create_customer_group(
    customer_group: CustomerGroup,
    customer_ids: Iterable = (),
    error_tracker: Optional[ErrorTracker] = None
) -> OperationResult:
    """
    Save a new customer group and move the given customers into it.

    Steps, inside one transaction:
    1. Validate and save the group
    2. Move every listed customer into it
    3. Reset positions of the groups the customers left, then of the new group

    Args:
        customer_group: Unsaved CustomerGroup instance
        customer_ids: Ids of customers to move into the group (may be empty)
        error_tracker: Shared tracker; a new one is created when omitted

    Returns:
        OperationResult with the group, or None on failure
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('create_customer_group')

    with transaction.atomic():
        if not save_record(customer_group, error_tracker):
            return rollback(error_tracker)

        _assign_customers_to_new_group(customer_group, customer_ids, error_tracker)

        if error_tracker.has_error():
            result = rollback(error_tracker)
            customer_group.pk = None
            customer_group._state.adding = True
            return result

    logger.info("Created customer group %s (%s)", customer_group.id, customer_group.name)
    return OperationResult.ok(customer_group)


def _assign_customers_to_new_group(customer_group, customer_ids, error_tracker):
    customers = (
        Customer.objects
        .filter(id__in=list(customer_ids))
        .order_by('customer_group_id', 'is_withheld', 'position', 'id')
    )
    vacated_group_ids = set(customers.values_list('customer_group_id', flat=True))

    for customer in customers:
        customer.customer_group = customer_group
        if not save_record(customer, error_tracker):
            error_tracker.add(ASSIGN_CUSTOMER_ERROR)
            break

    reset_customer_positions(vacated_group_ids, error_tracker)
    reset_customer_positions([customer_group.id], error_tracker)


# =============================================================================
# Update
# =============================================================================

def update_customer_group(
    customer_group: CustomerGroup,
    *,
    name: Optional[str] = None,
    customer_ids: Iterable = (),
    remove_customer_ids: Iterable = (),
    customer_positions: Iterable[Mapping] = (),
    error_tracker: Optional[ErrorTracker] = None,
    get_default_group: Callable[[], CustomerGroup] = get_default_customer_group
) -> OperationResult:
    """
    Apply a combined edit to a customer group in one transaction.

    Steps run in this order and the first step that records an error
    stops the rest:
    1. Validate the repositioning request (before anything is written)
    2. Rename the group when a non-blank name is given
    3. Move `remove_customer_ids` to the default group
    4. Move `customer_ids` into this group
    5. Move the requested customer to the requested position

    Only one customer can be repositioned per call. A request with several
    entries, a position outside 1..group size, or duplicate customer ids
    fails with "Invalid position provided".

    Args:
        customer_group: Existing CustomerGroup
        name: New group name
        customer_ids: Customers to add
        remove_customer_ids: Customers to send back to the default group
        customer_positions: Mappings with `customer_id` and `position`
        error_tracker: Shared tracker; a new one is created when omitted
        get_default_group: Lookup for the default group

    Returns:
        OperationResult with the group. On failure the group is reloaded
        from the database.
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('update_customer_group')

    customer_positions = list(customer_positions)
    steps = (
        lambda: _validate_customer_positions(customer_group, customer_positions, error_tracker),
        lambda: _rename_customer_group(customer_group, name, error_tracker),
        lambda: _remove_customers(customer_group, remove_customer_ids, get_default_group, error_tracker),
        lambda: _add_customers(customer_group, customer_ids, error_tracker),
        lambda: _reposition_customers(customer_group, customer_positions, error_tracker),
    )

    with transaction.atomic():
        for step in steps:
            step()
            if error_tracker.has_error():
                failure = rollback(error_tracker)
                break
        else:
            failure = None

    if failure is not None:
        customer_group.refresh_from_db()
        failure.result = customer_group
        return failure

    logger.info("Updated customer group %s (%s)", customer_group.id, customer_group.name)
    return OperationResult.ok(customer_group)


def _validate_customer_positions(customer_group, customer_positions, error_tracker):
    if not customer_positions:
        return

    positions = [entry['position'] for entry in customer_positions]
    customer_ids = [entry['customer_id'] for entry in customer_positions]

    valid_positions = (
        # only one customer may be moved per update
        len(positions) == 1
        and min(positions) >= 1
        and max(positions) <= customer_group.customers.count()
    )
    valid_customers = len(customer_ids) == len(set(customer_ids))

    if not (valid_positions and valid_customers):
        error_tracker.add(INVALID_POSITION_ERROR)


def _rename_customer_group(customer_group, name, error_tracker):
    if name is None or not str(name).strip():
        return

    customer_group.name = name
    save_record(customer_group, error_tracker)


def _remove_customers(customer_group, remove_customer_ids, get_default_group, error_tracker):
    customers = list(
        customer_group.customers
        .filter(id__in=list(remove_customer_ids))
        .order_by('is_withheld', 'position', 'id')
    )
    if not customers:
        return

    default_group = get_default_group()
    vacated_group_ids = {customer.customer_group_id for customer in customers}

    _move_customers(customers, default_group, error_tracker)
    reset_customer_positions(vacated_group_ids, error_tracker)


def _add_customers(customer_group, customer_ids, error_tracker):
    customers = list(
        Customer.objects
        .filter(id__in=list(customer_ids))
        .order_by('customer_group_id', 'is_withheld', 'position', 'id')
    )
    if not customers:
        return

    vacated_group_ids = {customer.customer_group_id for customer in customers}

    _move_customers(customers, customer_group, error_tracker)
    reset_customer_positions(vacated_group_ids, error_tracker)


def _reposition_customers(customer_group, customer_positions, error_tracker):
    for entry in customer_positions:
        customer = customer_group.customers.filter(id=entry['customer_id']).first()
        if customer is None:
            continue
        customer.position = entry['position']
        save_record(customer, error_tracker)


def _move_customers(customers, target_group, error_tracker):
    for customer in customers:
        customer.customer_group = target_group
        save_record(customer, error_tracker)


# =============================================================================
# Delete
# =============================================================================

def delete_customer_group(
    customer_group: CustomerGroup,
    error_tracker: Optional[ErrorTracker] = None,
    get_default_group: Callable[[], CustomerGroup] = get_default_customer_group
) -> OperationResult:
    """
    Delete a non-default customer group, moving its customers to the default group.

    Withheld customers are moved with one bulk UPDATE that skips
    validation. Active customers are saved one by one and validated, and
    the first invalid one stops the deletion. Positions of the default
    group are reset afterwards.

    Args:
        customer_group: CustomerGroup to delete
        error_tracker: Shared tracker; a new one is created when omitted
        get_default_group: Lookup for the default group

    Returns:
        OperationResult with the deleted group, or None on failure
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('delete_customer_group')

    if customer_group.is_default:
        error_tracker.add(DELETE_DEFAULT_GROUP_ERROR)
        return OperationResult.failed(error_tracker)

    group_id = customer_group.id

    with transaction.atomic():
        default_group = get_default_group()

        if not _move_members_to_default_group(customer_group, default_group, error_tracker):
            return rollback(error_tracker)

        reset_customer_positions([default_group.id], error_tracker)

        try:
            customer_group.delete()
        except (ProtectedError, DefaultGroupDeletionError) as exc:
            error_tracker.add(exc.args[0])

        if error_tracker.has_error():
            return rollback(error_tracker)

    logger.info("Deleted customer group %s", group_id)
    return OperationResult.ok(customer_group)


def _move_members_to_default_group(customer_group, default_group, error_tracker) -> bool:
    customer_group.customers.withheld().update(customer_group=default_group)

    members = customer_group.customers.kept().order_by('position', 'id')
    for customer in members:
        customer.customer_group = default_group
        if not save_record(customer, error_tracker):
            return False

    return True
