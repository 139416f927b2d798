"""Build canonical rules from the shapes callers write them in."""

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .models import (
    Excluder,
    Formatter,
    FunctionFormatter,
    FunctionMatcher,
    FunctionOption,
    LiteralFormatter,
    LiteralOption,
    Matcher,
    PatternMatcher,
    Rule,
    RuleDefinitionError,
    RuleOption,
    RuleSet,
)

RULE_KEYS = frozenset(
    ["match", "capture", "format", "option", "ignore", "skip", "exclude", "include", "rules"]
)


def make_matcher(spec: Any) -> Matcher:
    """Build a matcher from a regex string, compiled pattern or callable."""
    if isinstance(spec, Matcher):
        return spec
    if isinstance(spec, re.Pattern):
        return PatternMatcher(spec)
    if isinstance(spec, str):
        try:
            return PatternMatcher(re.compile(spec))
        except re.error as e:
            raise RuleDefinitionError(f"Invalid pattern {spec!r}: {e}") from e
    if callable(spec):
        return FunctionMatcher(spec)
    raise RuleDefinitionError(f"Unsupported matcher {spec!r}: expected a pattern or a callable")


def make_formatter(spec: Any) -> Formatter:
    if isinstance(spec, Formatter):
        return spec
    if isinstance(spec, str):
        return LiteralFormatter(spec)
    if callable(spec):
        return FunctionFormatter(spec)
    raise RuleDefinitionError(f"Unsupported formatter {spec!r}: expected a string or a callable")


def make_option(spec: Any) -> RuleOption:
    if isinstance(spec, RuleOption):
        return spec
    if callable(spec):
        return FunctionOption(spec)
    return LiteralOption(spec)


def _make_excluder(spec: Any) -> Excluder:
    if isinstance(spec, Excluder):
        return spec
    if isinstance(spec, str):
        return Excluder(spec)
    if isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[0], str):
        return Excluder(spec[0], spec[1])
    raise RuleDefinitionError(
        f"Invalid excluder {spec!r}: expected a name or a (name, option) pair"
    )


def make_excluders(spec: Any) -> tuple[Excluder, ...]:
    """Normalize an exclude setting into a tuple of excluders.

    A name, an ``Excluder`` or a ``(name, option)`` tuple is a single
    excluder; a list (or any other iterable) is a union of excluders.
    """
    if isinstance(spec, (str, Excluder, tuple)):
        return (_make_excluder(spec),)
    if isinstance(spec, Iterable):
        return tuple(_make_excluder(item) for item in spec)
    raise RuleDefinitionError(f"Invalid exclude setting {spec!r}")


def _check_capture(name: str, capture: Any) -> int:
    if isinstance(capture, bool) or not isinstance(capture, int) or capture < 0:
        raise RuleDefinitionError(
            f"Rule '{name}' has invalid capture {capture!r}: expected a non-negative integer"
        )
    return capture


def _make_exclude_setting(spec: Mapping[str, Any]) -> Optional[tuple[Excluder, ...]]:
    """Absent means default self-exclusion; an explicit None excludes nothing."""
    if "exclude" not in spec:
        return None
    if spec["exclude"] is None:
        return ()
    return make_excluders(spec["exclude"])


def _rule_from_mapping(name: str, spec: Mapping[str, Any]) -> Rule:
    unknown = set(spec) - RULE_KEYS
    if unknown:
        raise RuleDefinitionError(
            f"Rule '{name}' has unknown setting(s): {', '.join(sorted(unknown))}"
        )
    if "match" not in spec:
        raise RuleDefinitionError(f"Rule '{name}' missing required 'match' setting")

    capture = spec.get("capture")
    formatter = spec.get("format")
    option = spec.get("option")
    include = spec.get("include")
    replace = spec.get("rules")

    return Rule(
        name=name,
        matcher=make_matcher(spec["match"]),
        capture=None if capture is None else _check_capture(name, capture),
        formatter=None if formatter is None else make_formatter(formatter),
        option=None if "option" not in spec else make_option(option),
        ignore=bool(spec.get("ignore", False)),
        skip=bool(spec.get("skip", False)),
        exclude=_make_exclude_setting(spec),
        include=() if include is None else make_ruleset(include),
        rules=None if replace is None else make_ruleset(replace),
    )


def make_rule(name: str, spec: Any) -> Rule:
    """
    Build a rule from a name and a spec.

    The spec is either a bare matcher (regex string, compiled pattern,
    ``Matcher`` or callable) or a mapping with a required ``match`` key and
    any of ``capture``, ``format``, ``option``, ``ignore``, ``skip``,
    ``exclude``, ``include`` and ``rules``.

    Examples:
        make_rule("vowel", r"\\A[aeiou]+")
        make_rule("bracket", {"match": r"\\A\\((.*?)\\)", "exclude": "consonant"})

    Raises:
        RuleDefinitionError: If the spec has an unsupported shape
    """
    if not isinstance(name, str) or not name:
        raise RuleDefinitionError(f"Invalid rule name {name!r}: expected a non-empty string")
    if isinstance(spec, Mapping):
        return _rule_from_mapping(name, spec)
    return Rule(name=name, matcher=make_matcher(spec))


def _make_ruleset_item(item: Any) -> Rule:
    if isinstance(item, Rule):
        return item
    if isinstance(item, tuple) and len(item) == 2:
        return make_rule(item[0], item[1])
    raise RuleDefinitionError(f"Invalid rule {item!r}: expected a Rule or a (name, spec) pair")


def make_ruleset(items: Any) -> RuleSet:
    """
    Normalize rules into an immutable rule set.

    Accepts a single ``Rule``, a single ``(name, spec)`` pair, or an iterable
    of those. Order is kept: earlier rules have higher priority.
    """
    if isinstance(items, Rule):
        return (items,)
    if isinstance(items, tuple) and len(items) == 2 and isinstance(items[0], str):
        return (make_rule(items[0], items[1]),)
    if isinstance(items, Mapping) or isinstance(items, str):
        raise RuleDefinitionError(
            f"Invalid rules {items!r}: expected a sequence of rules or (name, spec) pairs"
        )
    return tuple(_make_ruleset_item(item) for item in items)
