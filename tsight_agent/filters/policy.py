"""Inclusion decisions for databases, tables, columns and cell values."""

from dataclasses import dataclass, field
from typing import Optional

from ..config.models import GlobalFilters
from ..utils import setup_logger
from .rules import (
    COLUMN_NAME,
    COLUMN_VALUE,
    DATABASE,
    TABLE,
    FilterRuleSet,
    compile_rule_set,
)

logger = setup_logger(__name__)

# Always excluded, even when an allow pattern matches
BUILTIN_EXCLUDED_DATABASES = frozenset({
    "system",
    "INFORMATION_SCHEMA",
    "information_schema",
})


@dataclass(frozen=True)
class DecisionPolicy:
    """Allow-then-exclude policy over the four filter dimensions.

    For every dimension the decision is taken in a fixed order:

    1. If the allow set has patterns, a candidate matching none of them is
       excluded. An empty allow set admits everything.
    2. A candidate matching any exclude pattern is excluded.
    3. Anything else is included.

    Databases listed in ``BUILTIN_EXCLUDED_DATABASES`` are excluded before
    step 1. Dimensions are independent of each other.

    The policy is immutable and safe to share between concurrent discovery
    and scrubbing tasks.
    """

    allow: FilterRuleSet = field(default_factory=FilterRuleSet)
    exclude: FilterRuleSet = field(default_factory=FilterRuleSet)

    @classmethod
    def from_global_filters(cls, global_filters: Optional[GlobalFilters]) -> 'DecisionPolicy':
        """Build a policy from configuration.

        Args:
            global_filters: Filter section of the agent configuration, or None

        Returns:
            DecisionPolicy instance

        Raises:
            InvalidPatternError: If any configured pattern fails to compile
        """
        if global_filters is None:
            return cls()

        policy = cls(
            allow=compile_rule_set(global_filters.sql_filters_allow),
            exclude=compile_rule_set(global_filters.sql_filters_exclude),
        )
        logger.info(f"Compiled SQL filter policy: {policy.describe()}")
        return policy

    def _should_exclude(self, dimension: str, candidate: str) -> bool:
        if not self.allow.is_empty(dimension):
            if not self.allow.matches(dimension, candidate):
                return True

        return self.exclude.matches(dimension, candidate)

    def should_exclude_database(self, name: str) -> bool:
        """Check if a database should be excluded."""
        if name in BUILTIN_EXCLUDED_DATABASES:
            return True
        return self._should_exclude(DATABASE, name)

    def should_exclude_table(self, name: str) -> bool:
        """Check if a table should be excluded."""
        return self._should_exclude(TABLE, name)

    def should_exclude_column(self, name: str) -> bool:
        """Check if a column should be excluded."""
        return self._should_exclude(COLUMN_NAME, name)

    def should_exclude_value(self, value: str) -> bool:
        """Check if a cell value should be excluded."""
        return self._should_exclude(COLUMN_VALUE, value)

    @property
    def has_row_rules(self) -> bool:
        """Whether any column-name or column-value pattern is configured."""
        return any(
            not rule_set.is_empty(dimension)
            for rule_set in (self.allow, self.exclude)
            for dimension in (COLUMN_NAME, COLUMN_VALUE)
        )

    def describe(self) -> str:
        """Summarise pattern counts per direction and dimension."""
        parts = []
        for direction, rule_set in (("allow", self.allow), ("exclude", self.exclude)):
            counts = ", ".join(
                f"{dimension}={len(patterns)}"
                for dimension, patterns in rule_set.to_dict().items()
            )
            parts.append(f"{direction}({counts})")
        return "; ".join(parts)
