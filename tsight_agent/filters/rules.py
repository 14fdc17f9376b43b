"""Compilation of raw filter patterns into rule sets.

A rule set holds one tuple of compiled regular expressions per filter
dimension. Configuration may supply any number of rule blocks per direction
(exclude or allow); they are flattened into a single rule set, so the order of
blocks and patterns carries no meaning.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Pattern, Tuple, Union

from ..config.models import SqlFilterRules
from ..utils import InvalidPatternError

DATABASE = "database"
TABLE = "table"
COLUMN_NAME = "column_name"
COLUMN_VALUE = "column_value"

DIMENSIONS = (DATABASE, TABLE, COLUMN_NAME, COLUMN_VALUE)

# Dimension -> field of SqlFilterRules holding its raw patterns
RULE_FIELDS = {
    DATABASE: "database_regexes",
    TABLE: "table_regexes",
    COLUMN_NAME: "column_name_regexes",
    COLUMN_VALUE: "column_value_regexes",
}


@dataclass(frozen=True)
class FilterRuleSet:
    """Compiled patterns for every filter dimension."""

    database: Tuple[Pattern, ...] = ()
    table: Tuple[Pattern, ...] = ()
    column_name: Tuple[Pattern, ...] = ()
    column_value: Tuple[Pattern, ...] = ()

    def patterns(self, dimension: str) -> Tuple[Pattern, ...]:
        """Get the compiled patterns of one dimension."""
        if dimension not in RULE_FIELDS:
            raise KeyError(f"Unknown filter dimension: {dimension}")
        return getattr(self, dimension)

    def is_empty(self, dimension: Optional[str] = None) -> bool:
        """Check whether a dimension (or the whole set) has no patterns."""
        if dimension is None:
            return all(not self.patterns(d) for d in DIMENSIONS)
        return not self.patterns(dimension)

    def matches(self, dimension: str, candidate: str) -> bool:
        """Check whether any pattern of the dimension matches anywhere in candidate."""
        return any(pattern.search(candidate) for pattern in self.patterns(dimension))

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert rule set to raw pattern strings."""
        return {
            dimension: [pattern.pattern for pattern in self.patterns(dimension)]
            for dimension in DIMENSIONS
        }


def compile_pattern(pattern: str, dimension: str) -> Pattern:
    """Compile a single raw pattern.

    Args:
        pattern: Raw regular expression from configuration
        dimension: Dimension the pattern belongs to (for error reporting)

    Returns:
        Compiled pattern

    Raises:
        InvalidPatternError: If the pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as e:
        raise InvalidPatternError(pattern, dimension, e) from e


def compile_rule_set(
    blocks: Optional[Iterable[Union[SqlFilterRules, Dict[str, Any]]]],
) -> FilterRuleSet:
    """Compile and flatten rule blocks into one rule set.

    Args:
        blocks: Rule blocks from configuration; None means no constraint

    Returns:
        Rule set with the union of all patterns per dimension

    Raises:
        InvalidPatternError: On the first pattern that fails to compile
    """
    compiled: Dict[str, List[Pattern]] = {dimension: [] for dimension in DIMENSIONS}

    for block in blocks or []:
        if isinstance(block, dict):
            block = SqlFilterRules.model_validate(block)

        for dimension, field_name in RULE_FIELDS.items():
            for pattern in getattr(block, field_name) or []:
                compiled[dimension].append(compile_pattern(pattern, dimension))

    return FilterRuleSet(**{
        dimension: tuple(patterns) for dimension, patterns in compiled.items()
    })
