"""SQL filter rules, decision policy and result scrubbing."""

from .rules import (
    DIMENSIONS,
    FilterRuleSet,
    compile_pattern,
    compile_rule_set,
)
from .policy import BUILTIN_EXCLUDED_DATABASES, DecisionPolicy
from .scrubber import DynamicRow, is_row_allowed, normalise_value, scrub_rows

__all__ = [
    "DIMENSIONS",
    "FilterRuleSet",
    "compile_pattern",
    "compile_rule_set",
    "BUILTIN_EXCLUDED_DATABASES",
    "DecisionPolicy",
    "DynamicRow",
    "is_row_allowed",
    "normalise_value",
    "scrub_rows",
]
