"""Rules system for rule-driven nested parsing."""

from .builder import make_excluders, make_matcher, make_rule, make_ruleset
from .models import (
    Excluder,
    Formatter,
    FunctionFormatter,
    FunctionMatcher,
    FunctionOption,
    LiteralFormatter,
    LiteralOption,
    Matcher,
    MatcherContractViolation,
    NestingDepthExceeded,
    NestParseError,
    PatternMatcher,
    Rule,
    RuleDefinitionError,
    RuleOption,
    RuleSet,
    Span,
)
from .parser import RuleParseError, list_rulesets, parse_yaml_rules, parse_yaml_rules_file
from .transform import derive_child_rules

__all__ = [
    "Excluder",
    "Formatter",
    "FunctionFormatter",
    "FunctionMatcher",
    "FunctionOption",
    "LiteralFormatter",
    "LiteralOption",
    "Matcher",
    "MatcherContractViolation",
    "NestParseError",
    "NestingDepthExceeded",
    "PatternMatcher",
    "Rule",
    "RuleDefinitionError",
    "RuleOption",
    "RuleParseError",
    "RuleSet",
    "Span",
    "derive_child_rules",
    "list_rulesets",
    "make_excluders",
    "make_matcher",
    "make_rule",
    "make_ruleset",
    "parse_yaml_rules",
    "parse_yaml_rules_file",
]
