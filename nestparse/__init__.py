"""Rule-driven recursive descent parsing of nested text."""

from nestparse.models.ast import Branch, Node, TaggedBranch
from nestparse.pipeline.driver import parse
from nestparse.rules import (
    Excluder,
    MatcherContractViolation,
    NestingDepthExceeded,
    NestParseError,
    Rule,
    RuleDefinitionError,
    RuleParseError,
    Span,
    make_rule,
    make_ruleset,
    parse_yaml_rules_file,
)

__all__ = [
    "Branch",
    "Excluder",
    "MatcherContractViolation",
    "NestParseError",
    "NestingDepthExceeded",
    "Node",
    "Rule",
    "RuleDefinitionError",
    "RuleParseError",
    "Span",
    "TaggedBranch",
    "make_rule",
    "make_ruleset",
    "parse",
    "parse_yaml_rules_file",
]
