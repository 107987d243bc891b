"""
Customer management service.

Creates, updates and deletes customers. A customer whose group is
missing or invalid falls back to the default customer group.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from django.db import transaction
from django.db.models import ProtectedError

from apps.customers.models import Customer, CustomerGroup

from .base import rollback, save_record
from .error_tracker import ErrorTracker, OperationResult
from .group_lookup import customer_group_exists, get_default_customer_group
from .position_reset import reset_customer_positions

logger = logging.getLogger(__name__)


def create_customer(
    customer_params: Mapping[str, Any],
    error_tracker: Optional[ErrorTracker] = None,
    get_default_group: Callable[[], CustomerGroup] = get_default_customer_group
) -> OperationResult:
    """
    Create a customer.

    When `customer_group_id` does not reference an existing group, the
    default group is used instead. The customer is appended to the bottom
    of its group.

    Args:
        customer_params: Allow-listed Customer attributes
        error_tracker: Shared tracker; a new one is created when omitted
        get_default_group: Lookup for the default group

    Returns:
        OperationResult with the customer, or None on failure
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('create_customer')

    params = dict(customer_params)
    if not customer_group_exists(params.get('customer_group_id')):
        params['customer_group_id'] = get_default_group().id

    customer = Customer(**params)

    with transaction.atomic():
        if not save_record(customer, error_tracker):
            return rollback(error_tracker)

    logger.info("Created customer %s in customer group %s", customer.id, customer.customer_group_id)
    return OperationResult.ok(customer)


def update_customer(
    customer: Customer,
    customer_attributes: Mapping[str, Any],
    error_tracker: Optional[ErrorTracker] = None,
    get_default_group: Callable[[], CustomerGroup] = get_default_customer_group
) -> OperationResult:
    """
    Update a customer's attributes.

    None values mean "leave unchanged". An invalid `customer_group_id` is
    dropped, unless the customer has no valid group, in which case the
    default group is used. When the group changes, positions of the
    previous group are reset.

    Args:
        customer: Existing Customer
        customer_attributes: Allow-listed attributes to change
        error_tracker: Shared tracker; a new one is created when omitted
        get_default_group: Lookup for the default group

    Returns:
        OperationResult with the customer
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('update_customer')

    previous_group_id = customer.customer_group_id
    attributes = _build_customer_attributes(customer, customer_attributes, get_default_group)

    for attribute, value in attributes.items():
        setattr(customer, attribute, value)

    with transaction.atomic():
        if not save_record(customer, error_tracker):
            return rollback(error_tracker, customer)

        if customer.customer_group_id != previous_group_id:
            reset_customer_positions([previous_group_id], error_tracker)

        if error_tracker.has_error():
            return rollback(error_tracker, customer)

    logger.info("Updated customer %s", customer.id)
    return OperationResult.ok(customer)


def _build_customer_attributes(customer, customer_attributes, get_default_group) -> Dict[str, Any]:
    attributes = {key: value for key, value in customer_attributes.items() if value is not None}

    if customer_group_exists(attributes.get('customer_group_id')):
        return attributes

    # missing or invalid group id
    if not customer_group_exists(customer.customer_group_id):
        attributes['customer_group_id'] = get_default_group().id
    else:
        attributes.pop('customer_group_id', None)

    return attributes


def delete_customer(
    customer: Customer,
    error_tracker: Optional[ErrorTracker] = None,
    get_default_group: Callable[[], CustomerGroup] = get_default_customer_group
) -> OperationResult:
    """
    Delete a customer.

    The customer is pointed at the default group first so the removed
    record never references a group that may disappear later. Its old
    partition closes the gap it leaves.

    Args:
        customer: Customer to delete
        error_tracker: Shared tracker; a new one is created when omitted
        get_default_group: Lookup for the default group

    Returns:
        OperationResult with the deleted customer, or None on failure
    """
    if error_tracker is None:
        error_tracker = ErrorTracker('delete_customer')

    customer_id = customer.id

    with transaction.atomic():
        customer.customer_group_id = get_default_group().id

        try:
            customer.delete()
        except ProtectedError as exc:
            error_tracker.add(exc.args[0])

        if error_tracker.has_error():
            return rollback(error_tracker)

    logger.info("Deleted customer %s", customer_id)
    return OperationResult.ok(customer)
