"""Find the rule that applies at the front of the remaining input."""

from dataclasses import dataclass
from typing import Optional

from nestparse.rules.models import Rule, RuleSet, Span


@dataclass(frozen=True)
class Match:
    """A rule together with the spans its matcher produced."""

    rule: Rule
    spans: list[Span]


def find_match(text: str, rules: RuleSet) -> Optional[Match]:
    """Return the first rule, in priority order, whose matcher succeeds on text.

    Later rules are never consulted once one matches, even if building a node
    from that match later fails.
    """
    for rule in rules:
        spans = rule.matcher.match(text)
        if spans is not None:
            return Match(rule=rule, spans=spans)
    return None
