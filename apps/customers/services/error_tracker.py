"""
Error collection and result envelope for customer operations.

Operations do not raise for validation or business-rule failures. Every
step pushes human-readable messages into one shared ErrorTracker, and the
top-level operation turns the tracker into an OperationResult.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from django.core.exceptions import NON_FIELD_ERRORS, FieldDoesNotExist, ValidationError
from django.utils.text import capfirst


class ErrorTracker:
    """
    Ordered collection of error messages for one operation call.

    Pass the same instance through nested calls so that every step
    reports into a single failure list.
    """

    def __init__(self, name: str = 'error'):
        self.name = name
        self._errors: List[str] = []

    def __repr__(self):
        return f"<ErrorTracker {self.name}: {self._errors!r}>"

    def add(self, errors) -> None:
        """Add a message or a (possibly nested) list of messages."""
        if errors is None:
            return
        if isinstance(errors, (list, tuple)):
            for error in errors:
                self.add(error)
            return
        self._errors.append(str(errors))

    def add_validation_error(self, exc: ValidationError, model=None) -> None:
        """
        Add the messages of a Django ValidationError.

        Field errors become "Label: message"; non-field errors (such as
        unique constraint violations) are added verbatim.
        """
        if not hasattr(exc, 'error_dict'):
            self.add(exc.messages)
            return

        for field_name, messages in exc.message_dict.items():
            if field_name == NON_FIELD_ERRORS:
                self.add(messages)
            else:
                label = _field_label(model, field_name)
                self.add([f"{label}: {message}" for message in messages])

    def has_error(self) -> bool:
        return bool(self._errors)

    def error_list(self) -> List[str]:
        """Messages without duplicates, in first-seen order."""
        return list(dict.fromkeys(self._errors))


def _field_label(model, field_name):
    if model is not None:
        try:
            return capfirst(model._meta.get_field(field_name).verbose_name)
        except FieldDoesNotExist:
            pass
    return capfirst(field_name.replace('_', ' '))


@dataclass
class OperationResult:
    """Uniform envelope returned by every operation."""

    success: bool
    errors: List[str] = field(default_factory=list)
    result: Optional[Any] = None

    @classmethod
    def ok(cls, result=None) -> 'OperationResult':
        return cls(success=True, errors=[], result=result)

    @classmethod
    def failed(cls, error_tracker: ErrorTracker, result=None) -> 'OperationResult':
        return cls(success=False, errors=error_tracker.error_list(), result=result)

    def as_dict(self) -> dict:
        return {'success': self.success, 'errors': self.errors, 'result': self.result}
