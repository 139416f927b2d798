"""Parser for YAML rule files."""

import re
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]

from .builder import make_excluders, make_formatter, make_option
from .models import (
    Excluder,
    NestParseError,
    PatternMatcher,
    Rule,
    RuleDefinitionError,
    RuleSet,
)


class RuleParseError(NestParseError):
    """Raised when a rule cannot be parsed."""

    pass


_RULE_FIELDS = frozenset(
    [
        "name",
        "match",
        "flags",
        "capture",
        "format",
        "option",
        "ignore",
        "skip",
        "exclude",
        "include",
        "rules",
    ]
)


def _parse_flags(flags: Any, rule_name: str) -> re.RegexFlag:
    """Parse a list of `re` flag names into combined flags."""
    if isinstance(flags, str):
        flags = [flags]
    if not isinstance(flags, list):
        raise RuleParseError(f"Rule '{rule_name}' 'flags' must be a list of flag names")
    combined = re.RegexFlag(0)
    for flag_name in flags:
        flag = getattr(re.RegexFlag, str(flag_name).upper(), None)
        if flag is None:
            valid_flags = ["ASCII", "DOTALL", "IGNORECASE", "MULTILINE", "VERBOSE"]
            raise RuleParseError(
                f"Rule '{rule_name}' has invalid flag '{flag_name}'. Valid flags: {', '.join(valid_flags)}"
            )
        combined |= flag
    return combined


def _compile_pattern(rule_dict: dict[str, Any], rule_name: str) -> PatternMatcher:
    """Compile the rule's regex with its flags."""
    pattern = rule_dict["match"]
    if not isinstance(pattern, str):
        raise RuleParseError(f"Rule '{rule_name}' 'match' must be a regular expression string")
    flags = _parse_flags(rule_dict.get("flags", []), rule_name)
    try:
        return PatternMatcher(re.compile(pattern, flags))
    except re.error as e:
        raise RuleParseError(f"Rule '{rule_name}' has invalid pattern '{pattern}': {e}") from e


def _parse_excluder_item(item: Any, rule_name: str) -> Any:
    """Turn a YAML excluder (name or {name, option} mapping) into a builder shape."""
    if isinstance(item, dict):
        if "name" not in item:
            raise RuleParseError(f"Rule '{rule_name}' has an excluder missing 'name'")
        if "option" in item:
            return Excluder(item["name"], item["option"])
        return Excluder(item["name"])
    return item


def _parse_exclude(exclude: Any, rule_name: str) -> tuple[Excluder, ...]:
    if exclude is None:
        return ()
    if isinstance(exclude, list):
        exclude = [_parse_excluder_item(item, rule_name) for item in exclude]
    else:
        exclude = _parse_excluder_item(exclude, rule_name)
    try:
        return make_excluders(exclude)
    except RuleDefinitionError as e:
        raise RuleParseError(str(e)) from e


def _validate_yaml_rule_fields(rule_dict: Any) -> None:
    """Validate required and known fields in a YAML rule."""
    if not isinstance(rule_dict, dict):
        raise RuleParseError(f"Rule must be a dictionary, got {rule_dict!r}")
    for field in ["name", "match"]:
        if field not in rule_dict:
            name_info = f" '{rule_dict['name']}'" if "name" in rule_dict else ""
            raise RuleParseError(f"Rule{name_info} missing required '{field}' field")
    unknown = set(rule_dict) - _RULE_FIELDS
    if unknown:
        raise RuleParseError(
            f"Rule '{rule_dict['name']}' has unknown field(s): {', '.join(sorted(unknown))}"
        )


class _RulesetResolver:
    """Resolves named rulesets, their `extends` chains and ruleset references."""

    def __init__(self, rulesets: dict[str, Any]):
        self.rulesets = rulesets
        self._resolved: dict[str, RuleSet] = {}
        self._resolving: list[str] = []

    def resolve(self, ruleset_name: str) -> RuleSet:
        """Recursively resolve ruleset inheritance."""
        if ruleset_name in self._resolved:
            return self._resolved[ruleset_name]

        if ruleset_name in self._resolving:
            chain = " -> ".join(self._resolving + [ruleset_name])
            raise RuleParseError(f"Circular dependency detected in ruleset '{ruleset_name}' ({chain})")

        if ruleset_name not in self.rulesets:
            available = ", ".join(self.rulesets.keys())
            raise RuleParseError(
                f"Ruleset '{ruleset_name}' not found. Available rulesets: {available}"
            )

        self._resolving.append(ruleset_name)
        ruleset = self.rulesets[ruleset_name] or {}
        if not isinstance(ruleset, dict):
            raise RuleParseError(f"Ruleset '{ruleset_name}' must be a dictionary")

        # Combine rules from extended rulesets and this ruleset
        extended_rules = self.resolve(ruleset["extends"]) if "extends" in ruleset else ()
        own_rules = self._parse_rule_list(ruleset.get("rules") or [], ruleset_name)
        self._resolving.pop()

        rules = extended_rules + own_rules
        self._resolved[ruleset_name] = rules
        return rules

    def _parse_rule_list(self, rule_dicts: Any, context: str) -> RuleSet:
        if not isinstance(rule_dicts, list):
            raise RuleParseError(f"Rules of '{context}' must be a list")
        return tuple(self._parse_rule(rule_dict) for rule_dict in rule_dicts)

    def _parse_nested(self, value: Any, rule_name: str) -> RuleSet:
        """Parse `include`/`rules`: a ruleset name or a list of inline rules."""
        if isinstance(value, str):
            return self.resolve(value)
        return self._parse_rule_list(value, rule_name)

    def _parse_rule(self, rule_dict: Any) -> Rule:
        """Parse a single rule from YAML dictionary."""
        _validate_yaml_rule_fields(rule_dict)
        name = str(rule_dict["name"])

        capture = rule_dict.get("capture")
        if capture is not None and (
            isinstance(capture, bool) or not isinstance(capture, int) or capture < 0
        ):
            raise RuleParseError(f"Rule '{name}' 'capture' must be a non-negative integer")

        formatter = rule_dict.get("format")
        if formatter is not None and not isinstance(formatter, str):
            raise RuleParseError(f"Rule '{name}' 'format' must be a string")

        return Rule(
            name=name,
            matcher=_compile_pattern(rule_dict, name),
            capture=capture,
            formatter=None if formatter is None else make_formatter(formatter),
            option=make_option(rule_dict["option"]) if "option" in rule_dict else None,
            ignore=bool(rule_dict.get("ignore", False)),
            skip=bool(rule_dict.get("skip", False)),
            exclude=_parse_exclude(rule_dict["exclude"], name) if "exclude" in rule_dict else None,
            include=self._parse_nested(rule_dict["include"], name) if "include" in rule_dict else (),
            rules=self._parse_nested(rule_dict["rules"], name) if "rules" in rule_dict else None,
        )


def _load_yaml_file(file_path: str) -> Any:
    """Load and validate YAML file."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {file_path}")

    with open(path, "r") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleParseError(f"Invalid YAML: {e}")


def _validate_rulesets_structure(data: Any) -> dict[str, Any]:
    """Validate and extract rulesets from YAML data."""
    if not isinstance(data, dict):
        raise RuleParseError("YAML file must contain a dictionary")

    if "rulesets" not in data:
        raise RuleParseError("YAML file missing 'rulesets' key")

    rulesets = data["rulesets"]
    if not isinstance(rulesets, dict):
        raise RuleParseError("'rulesets' must be a dictionary")

    return rulesets


def parse_yaml_rules(data: Any, ruleset_name: str = "default") -> RuleSet:
    """
    Parse rules from already loaded YAML data.

    Args:
        data: Mapping with a top-level 'rulesets' key
        ruleset_name: Name of the ruleset to build (default: "default")

    Returns:
        The rule set, rules of extended rulesets first

    Raises:
        RuleParseError: If the data is malformed
    """
    rulesets = _validate_rulesets_structure(data)
    return _RulesetResolver(rulesets).resolve(ruleset_name)


def list_rulesets(file_path: str) -> list[str]:
    """Return the names of the rulesets defined in a YAML rules file."""
    data = _load_yaml_file(file_path)
    return list(_validate_rulesets_structure(data).keys())


def parse_yaml_rules_file(file_path: str, ruleset_name: Optional[str] = None) -> RuleSet:
    """
    Parse rules from a YAML file with ruleset support.

    Args:
        file_path: Path to the YAML rules file
        ruleset_name: Name of the ruleset to load (default: "default")

    Returns:
        The rule set for the specified ruleset

    Raises:
        RuleParseError: If the YAML is invalid or rules are malformed
        FileNotFoundError: If the file doesn't exist
    """
    data = _load_yaml_file(file_path)
    return parse_yaml_rules(data, ruleset_name or "default")
