"""Field predicates and checks shared by the document store implementations."""

from datetime import datetime
from typing import Any

from circuit_backend.application.interfaces import Document, QueryOperator
from circuit_backend.domain.exceptions import StoreError, ValidationError

TIMESTAMP_FIELDS = ("createdAt", "updatedAt")


def matches(document: Document, field_name: str, operator: QueryOperator, value: Any) -> bool:
    """Return True if ``document[field_name] <operator> value`` holds.

    A document without the field never matches, and neither does a
    comparison between incomparable types.
    """
    if field_name not in document:
        return False
    actual = document[field_name]

    try:
        if operator is QueryOperator.EQ:
            return actual == value
        if operator is QueryOperator.NEQ:
            return actual != value
        if operator is QueryOperator.LT:
            return actual < value
        if operator is QueryOperator.LTE:
            return actual <= value
        if operator is QueryOperator.GT:
            return actual > value
        if operator is QueryOperator.GTE:
            return actual >= value
        if operator is QueryOperator.IN:
            return actual in value
        if operator is QueryOperator.CONTAINS:
            return isinstance(actual, list) and value in actual
    except TypeError:
        return False
    return False


def check_operand(operator: QueryOperator, value: Any) -> None:
    """Reject operands that can never be evaluated for the operator."""
    if operator is QueryOperator.IN and not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError("'in' queries require a list of values", field="value")


def check_timestamps(fields: Document) -> None:
    """Written timestamps must be datetimes; anything else is refused by every store."""
    for name in TIMESTAMP_FIELDS:
        stamp = fields.get(name)
        if stamp is not None and not isinstance(stamp, datetime):
            raise StoreError(f"'{name}' must be a datetime, got {type(stamp).__name__}")
