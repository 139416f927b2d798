"""Drive rule matching over the input and assemble the parse tree."""

import logging
from typing import Any, Optional, Union

from nestparse.config import get_settings
from nestparse.models.ast import Node
from nestparse.pipeline.construction import Construction, prepare, shape
from nestparse.pipeline.matching import find_match
from nestparse.rules.builder import make_ruleset
from nestparse.rules.models import NestingDepthExceeded, RuleSet

logger = logging.getLogger(__name__)


class _Frame:
    """A region of text being parsed with one rule set.

    Frames replace native recursion: the frame for a match's captured text
    sits on top of the frame that produced the match until it is exhausted.
    """

    def __init__(self, text: str, rules: RuleSet, construction: Optional[Construction] = None):
        self.text = text
        self.rules = rules
        self.construction = construction
        self.position = 0
        self.nodes: list[Node] = []
        self._literal_start: Optional[int] = None

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.text)

    def remaining(self) -> str:
        return self.text[self.position:]

    def take_literal(self, length: int) -> None:
        """Add unmatched characters to the pending literal run."""
        if self._literal_start is None:
            self._literal_start = self.position
        self.position += length

    def close_literal(self) -> None:
        """Emit the pending literal run as a single node."""
        if self._literal_start is not None:
            self.nodes.append(self.text[self._literal_start:self.position])
            self._literal_start = None

    def consume(self, length: int) -> None:
        self.close_literal()
        self.position += length

    def add(self, result: Union[Node, list[Node]]) -> None:
        """Add a node, or splice in the children of a skipped rule."""
        if isinstance(result, list):
            self.nodes.extend(result)
        else:
            self.nodes.append(result)

    def finish(self) -> list[Node]:
        self.close_literal()
        return self.nodes


def _step(frame: _Frame) -> Optional[Construction]:
    """Advance the frame by one match or one literal character.

    Returns the construction whose captured text still has to be parsed, if any.
    """
    remaining = frame.remaining()
    if not frame.rules:
        frame.take_literal(len(remaining))
        return None

    match = find_match(remaining, frame.rules)
    if match is None:
        frame.take_literal(1)
        return None

    construction = prepare(match, remaining, frame.rules)
    frame.consume(len(remaining) - len(construction.next_text))
    if match.rule.ignore:
        logger.debug("Ignored match of rule '%s'", match.rule.name)
        return None
    return construction


def parse(text: str, rules: Any, *, max_depth: Optional[int] = None) -> list[Node]:
    """
    Parse text into a list of nodes using the given rules.

    At every position the first rule (in order) whose matcher succeeds is
    applied; where none does, the character becomes part of a literal text
    run. The text captured by a match is parsed again with the rule set
    derived from the matched rule, and the resulting children are wrapped in
    a ``Branch`` (or ``TaggedBranch`` when the rule has an option), spliced
    into the parent (``skip``) or dropped (``ignore``).

    Args:
        text: The text to parse
        rules: ``Rule`` objects and/or ``(name, spec)`` pairs, highest priority first
        max_depth: Maximum nesting depth; defaults to the configured parser setting

    Returns:
        Top-level nodes in input order: literal strings and branches

    Raises:
        MatcherContractViolation: If a matcher returns spans that cannot be applied
        NestingDepthExceeded: If matches nest deeper than max_depth
        RuleDefinitionError: If rules are given in an unsupported shape
    """
    ruleset = make_ruleset(rules)
    if max_depth is None:
        max_depth = get_settings().parser.max_depth

    logger.debug("Parsing %d character(s) with %d rule(s)", len(text), len(ruleset))

    stack = [_Frame(text, ruleset)]
    while True:
        frame = stack[-1]
        if frame.exhausted:
            children = frame.finish()
            stack.pop()
            if not stack:
                return children
            stack[-1].add(shape(frame.construction, children))  # type: ignore[arg-type]
            continue

        construction = _step(frame)
        if construction is None:
            continue

        if max_depth is not None and len(stack) > max_depth:
            raise NestingDepthExceeded(
                f"Rule '{construction.match.rule.name}' matched at a nesting depth beyond {max_depth}"
            )
        logger.debug(
            "Rule '%s' matched %d span(s) at depth %d",
            construction.match.rule.name,
            len(construction.match.spans),
            len(stack),
        )
        stack.append(_Frame(construction.payload, construction.child_rules, construction))
