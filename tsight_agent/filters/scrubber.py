"""Row-level scrubbing of ad-hoc query results."""

from typing import Any, Dict, Iterable, List

from ..utils import setup_logger
from .policy import DecisionPolicy

logger = setup_logger(__name__)

DynamicRow = Dict[str, Any]


def normalise_value(value: str) -> str:
    """Remove spaces so that '4222 2222 2222 2' is checked as '4222222222222'."""
    return value.replace(" ", "")


def is_row_allowed(row: DynamicRow, policy: DecisionPolicy) -> bool:
    """Check a single row against the column-name and column-value rules.

    A row is rejected as a whole if any of its column names is excluded or
    any of its string values is excluded. Non-string values are not
    value-checked.

    Args:
        row: Result row mapping column names to values
        policy: Active decision policy

    Returns:
        True if the row may leave the agent
    """
    for column, value in row.items():
        if policy.should_exclude_column(column):
            return False

        if isinstance(value, str) and policy.should_exclude_value(normalise_value(value)):
            return False

    return True


def scrub_rows(rows: Iterable[DynamicRow], policy: DecisionPolicy) -> List[DynamicRow]:
    """Drop every row that contains an excluded column or value.

    Surviving rows are returned unchanged and in their original order. When
    the policy has no column-name or column-value rules the rows pass through
    untouched.

    Args:
        rows: Result rows of an ad-hoc query
        policy: Active decision policy

    Returns:
        Rows allowed by the policy
    """
    rows = list(rows)
    if not policy.has_row_rules:
        return rows

    scrubbed = [row for row in rows if is_row_allowed(row, policy)]

    dropped = len(rows) - len(scrubbed)
    if dropped:
        logger.info(f"Row filters dropped {dropped} of {len(rows)} rows")

    return scrubbed
