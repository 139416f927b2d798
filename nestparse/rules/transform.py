"""Derive the rule set used to parse the text captured by a match."""

from .models import Excluder, Rule, RuleSet


def _excluders_for(rule: Rule) -> tuple[Excluder, ...]:
    if rule.exclude is None:
        return (Excluder(rule.name),)
    return rule.exclude


def exclude_rules(rules: RuleSet, excluders: tuple[Excluder, ...]) -> RuleSet:
    """Return the rules not selected by any of the excluders."""
    if not excluders:
        return rules
    return tuple(
        candidate
        for candidate in rules
        if not any(excluder.selects(candidate) for excluder in excluders)
    )


def include_rules(rules: RuleSet, included: RuleSet) -> RuleSet:
    """Prepend the included rules so they take priority."""
    if not included:
        return rules
    return included + rules


def derive_child_rules(rule: Rule, rules: RuleSet) -> RuleSet:
    """
    Compute the rule set for the recursive parse of a match of ``rule``.

    A ``rules`` replacement wins outright. Otherwise the rules selected by
    ``exclude`` (by default every rule sharing the matched rule's name) are
    dropped and ``include`` is prepended. ``rules`` itself is never modified.
    """
    if rule.rules is not None:
        return rule.rules
    return include_rules(exclude_rules(rules, _excluders_for(rule)), rule.include)
