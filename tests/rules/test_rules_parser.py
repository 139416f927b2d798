"""Tests for YAML rule files."""

import re
from pathlib import Path

import pytest

from nestparse import Branch, TaggedBranch, parse
from nestparse.rules import (
    Excluder,
    LiteralFormatter,
    LiteralOption,
    RuleParseError,
    list_rulesets,
    parse_yaml_rules,
    parse_yaml_rules_file,
)

LISP_RULES = str(Path(__file__).parent.parent / "fixtures" / "lisp.yaml")


def write_rules(tmp_path, content):
    path = tmp_path / "rules.yaml"
    path.write_text(content)
    return str(path)


class TestParseYamlRulesFile:
    """Tests for loading rules from YAML files."""

    def test_extends_puts_base_rules_first(self):
        rules = parse_yaml_rules_file(LISP_RULES)
        assert [rule.name for rule in rules] == ["whitespace", "expression", "integer", "atom"]
        assert rules[0].ignore
        assert rules[1].exclude == ()
        assert rules[2].rules == ()
        assert rules[2].option == LiteralOption("int")
        assert rules[3].exclude is None

    def test_parse_with_loaded_rules(self):
        rules = parse_yaml_rules_file(LISP_RULES, "default")
        assert parse("(+ 1 x)", rules) == [
            Branch(
                "expression",
                [Branch("atom", ["+"]), TaggedBranch("integer", ["1"], "int"), Branch("atom", ["x"])],
            )
        ]

    def test_ruleset_reference(self):
        """Test that a ruleset name in 'rules' loads that ruleset."""
        rules = parse_yaml_rules_file(LISP_RULES, "quoted")
        assert [rule.name for rule in rules] == ["string", "list"]
        assert [rule.name for rule in rules[1].rules] == ["whitespace", "expression", "integer", "atom"]
        assert parse('"a b"[(f 2)]', rules) == [
            Branch("string", ["a b"]),
            Branch(
                "list",
                [Branch("expression", [Branch("atom", ["f"]), TaggedBranch("integer", ["2"], "int")])],
            ),
        ]

    def test_missing_extended_ruleset(self):
        with pytest.raises(RuleParseError, match="Ruleset 'missing' not found"):
            parse_yaml_rules_file(LISP_RULES, "broken")

    def test_unknown_ruleset(self):
        with pytest.raises(RuleParseError, match="Available rulesets: base, default, quoted, broken"):
            parse_yaml_rules_file(LISP_RULES, "nope")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Rules file not found"):
            parse_yaml_rules_file(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = write_rules(tmp_path, "rulesets: [unclosed\n")
        with pytest.raises(RuleParseError, match="Invalid YAML"):
            parse_yaml_rules_file(path)

    def test_list_rulesets(self):
        assert list_rulesets(LISP_RULES) == ["base", "default", "quoted", "broken"]


class TestParseYamlRules:
    """Tests for building rules from loaded YAML data."""

    def test_all_fields(self):
        data = {
            "rulesets": {
                "default": {
                    "rules": [
                        {
                            "name": "tag",
                            "match": r"\A<(\w+)>",
                            "flags": ["IGNORECASE"],
                            "capture": 1,
                            "format": "x",
                            "option": {"kind": "tag"},
                            "skip": True,
                            "exclude": ["a", {"name": "b", "option": 1}, {"name": "c"}],
                            "include": [{"name": "inner", "match": r"\Ai"}],
                        }
                    ]
                }
            }
        }
        (rule,) = parse_yaml_rules(data)
        assert rule.matcher.pattern.flags & re.IGNORECASE
        assert rule.capture == 1
        assert isinstance(rule.formatter, LiteralFormatter)
        assert rule.option == LiteralOption({"kind": "tag"})
        assert rule.skip and not rule.ignore
        assert rule.exclude == (Excluder("a"), Excluder("b", 1), Excluder("c"))
        assert [included.name for included in rule.include] == ["inner"]
        assert rule.rules is None

    def test_single_exclude_name(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "exclude": "b"}]}}}
        assert parse_yaml_rules(data)[0].exclude == (Excluder("b"),)

    def test_null_exclude_excludes_nothing(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "exclude": None}]}}}
        assert parse_yaml_rules(data)[0].exclude == ()

    def test_empty_ruleset(self):
        assert parse_yaml_rules({"rulesets": {"default": {}}}) == ()

    def test_circular_extends(self):
        data = {"rulesets": {"a": {"extends": "b"}, "b": {"extends": "a"}}}
        with pytest.raises(RuleParseError, match="Circular dependency"):
            parse_yaml_rules(data, "a")

    def test_circular_rules_reference(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "rules": "default"}]}}}
        with pytest.raises(RuleParseError, match="Circular dependency"):
            parse_yaml_rules(data)

    def test_missing_rulesets_key(self):
        with pytest.raises(RuleParseError, match="missing 'rulesets' key"):
            parse_yaml_rules({"rules": []})

    def test_not_a_dictionary(self):
        with pytest.raises(RuleParseError, match="must contain a dictionary"):
            parse_yaml_rules(["a"])

    def test_missing_match(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a"}]}}}
        with pytest.raises(RuleParseError, match="Rule 'a' missing required 'match' field"):
            parse_yaml_rules(data)

    def test_missing_name(self):
        data = {"rulesets": {"default": {"rules": [{"match": "a"}]}}}
        with pytest.raises(RuleParseError, match="missing required 'name' field"):
            parse_yaml_rules(data)

    def test_unknown_field(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "ignored": True}]}}}
        with pytest.raises(RuleParseError, match="unknown field"):
            parse_yaml_rules(data)

    def test_invalid_pattern(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "("}]}}}
        with pytest.raises(RuleParseError, match="invalid pattern"):
            parse_yaml_rules(data)

    def test_invalid_flag(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "flags": ["LOUD"]}]}}}
        with pytest.raises(RuleParseError, match="invalid flag 'LOUD'"):
            parse_yaml_rules(data)

    def test_invalid_capture(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "capture": -1}]}}}
        with pytest.raises(RuleParseError, match="'capture' must be a non-negative integer"):
            parse_yaml_rules(data)

    def test_invalid_excluder(self):
        data = {"rulesets": {"default": {"rules": [{"name": "a", "match": "a", "exclude": [{"option": 1}]}]}}}
        with pytest.raises(RuleParseError, match="excluder missing 'name'"):
            parse_yaml_rules(data)
