"""Build nodes from accepted matches."""

from dataclasses import dataclass
from typing import Union

from nestparse.models.ast import Branch, Node, TaggedBranch
from nestparse.pipeline.matching import Match
from nestparse.rules.models import MatcherContractViolation, RuleSet, Span
from nestparse.rules.transform import derive_child_rules


@dataclass(frozen=True)
class Construction:
    """Everything derived from a match before its captured text is parsed.

    ``payload`` is the formatted captured text, to be parsed with
    ``child_rules``. ``source`` is the unformatted input the matcher was
    given; the match spans index into it.
    """

    match: Match
    next_text: str
    source: str
    payload: str
    child_rules: RuleSet


def _select_capture(match: Match) -> Span:
    rule = match.rule
    spans = match.spans
    if rule.capture is None:
        return spans[-1]
    if rule.capture >= len(spans):
        raise MatcherContractViolation(
            f"Rule '{rule.name}' selects capture {rule.capture} but its matcher "
            f"returned {len(spans)} span(s)"
        )
    return spans[rule.capture]


def _check_entire(match: Match, entire: Span, text: str) -> int:
    consumed_end = entire.end
    if entire.offset < 0 or consumed_end > len(text):
        raise MatcherContractViolation(
            f"Rule '{match.rule.name}' matched span {tuple(entire)} outside an input of length {len(text)}"
        )
    if consumed_end == 0:
        raise MatcherContractViolation(
            f"Rule '{match.rule.name}' matched without consuming any input"
        )
    return consumed_end


def _check_capture(match: Match, capture: Span, consumed_end: int) -> None:
    if capture.offset < 0:
        raise MatcherContractViolation(
            f"Rule '{match.rule.name}' selects a capture group that did not take part in the match"
        )
    if capture.end > consumed_end:
        raise MatcherContractViolation(
            f"Rule '{match.rule.name}' captured span {tuple(capture)} beyond the consumed "
            f"region ending at {consumed_end}"
        )


def prepare(match: Match, text: str, rules: RuleSet) -> Construction:
    """Slice the input according to the match and derive the child rule set.

    Raises:
        MatcherContractViolation: If the spans cannot be applied to text
    """
    entire = match.spans[0]
    consumed_end = _check_entire(match, entire, text)
    capture = _select_capture(match)
    _check_capture(match, capture, consumed_end)

    captured = text[capture.offset:capture.end]
    formatter = match.rule.formatter
    payload = captured if formatter is None else formatter.format(captured)

    return Construction(
        match=match,
        next_text=text[consumed_end:],
        source=text,
        payload=payload,
        child_rules=derive_child_rules(match.rule, rules),
    )


def shape(construction: Construction, children: list[Node]) -> Union[Node, list[Node]]:
    """Wrap parsed children according to the rule.

    Skip rules return the children themselves, to be spliced into the parent.
    """
    rule = construction.match.rule
    if rule.skip:
        return children
    if rule.option is not None:
        value = rule.option.compute_option(construction.source, construction.match.spans)
        return TaggedBranch(rule.name, children, value)
    return Branch(rule.name, children)
