"""Helpers shared by the operation modules."""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from .error_tracker import ErrorTracker, OperationResult

logger = logging.getLogger(__name__)


def save_record(record, error_tracker: ErrorTracker) -> bool:
    """
    Validate and save a model instance.

    Validation messages go to the tracker and nothing is written.

    Returns:
        True when the record was saved
    """
    try:
        record.full_clean()
    except ValidationError as exc:
        error_tracker.add_validation_error(exc, model=type(record))
        return False

    record.save()
    return True


def rollback(error_tracker: ErrorTracker, result=None) -> OperationResult:
    """
    Mark the innermost atomic block for rollback and build the failure result.

    Must be called inside ``transaction.atomic()``.
    """
    transaction.set_rollback(True)
    logger.warning(
        "Rolling back %s: %s", error_tracker.name, '; '.join(error_tracker.error_list())
    )
    return OperationResult.failed(error_tracker, result=result)
