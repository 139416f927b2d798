"""Data models for the rules system."""

import abc
import re
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple, Optional, Sequence


class NestParseError(Exception):
    """Base class for all errors raised by nestparse."""

    pass


class MatcherContractViolation(NestParseError):
    """Raised when a matcher returns spans the engine cannot use."""

    pass


class NestingDepthExceeded(NestParseError):
    """Raised when nested matches go deeper than the configured limit."""

    pass


class RuleDefinitionError(NestParseError, ValueError):
    """Raised when a rule is built from an unsupported shape."""

    pass


class Span(NamedTuple):
    """A region of the matcher input, relative to its start."""

    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


class Matcher(abc.ABC):
    """Finds the spans of a rule in the remaining input."""

    @abc.abstractmethod
    def match(self, text: str) -> Optional[list[Span]]:
        """Return the spans found in text, or None when there is no match."""
        raise NotImplementedError

    @abc.abstractmethod
    def describe(self) -> str:
        raise NotImplementedError


class PatternMatcher(Matcher):
    """Matcher backed by a compiled regular expression.

    The pattern is searched, not anchored: patterns that must match at the
    start of the input say so themselves (``\\A``). The first span is the
    whole match, followed by one span per group up to the last group that
    took part in the match. Trailing groups that did not take part are left
    out, so the last span is always a real region; an interior group that
    did not take part is reported as ``Span(-1, 0)``.
    """

    def __init__(self, pattern: re.Pattern):
        self.pattern = pattern

    def match(self, text: str) -> Optional[list[Span]]:
        found = self.pattern.search(text)
        if found is None:
            return None

        spans = []
        for group in range(self.pattern.groups + 1):
            start, end = found.span(group)
            if start < 0:
                spans.append(Span(-1, 0))
            else:
                spans.append(Span(start, end - start))
        while spans[-1].offset < 0:
            spans.pop()
        return spans

    def describe(self) -> str:
        return f"/{self.pattern.pattern}/"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PatternMatcher) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"PatternMatcher({self.pattern.pattern!r})"


class FunctionMatcher(Matcher):
    """Matcher backed by a callable returning ``(offset, length)`` pairs or None."""

    def __init__(self, func: Callable[[str], Optional[Sequence[tuple[int, int]]]]):
        self.func = func

    def match(self, text: str) -> Optional[list[Span]]:
        result = self.func(text)
        if result is None:
            return None

        spans = []
        for item in result:
            try:
                offset, length = item
            except (TypeError, ValueError) as e:
                raise MatcherContractViolation(
                    f"Matcher {self.describe()} returned {item!r}, expected an (offset, length) pair"
                ) from e
            if not isinstance(offset, int) or not isinstance(length, int) or length < 0:
                raise MatcherContractViolation(
                    f"Matcher {self.describe()} returned invalid span {item!r}"
                )
            spans.append(Span(offset, length))

        if not spans:
            raise MatcherContractViolation(
                f"Matcher {self.describe()} returned an empty span sequence; return None for no match"
            )
        return spans

    def describe(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))

    def __repr__(self) -> str:
        return f"FunctionMatcher({self.describe()})"


class Formatter(abc.ABC):
    """Turns captured text into the text that is parsed further."""

    @abc.abstractmethod
    def format(self, text: str) -> str:
        raise NotImplementedError


class LiteralFormatter(Formatter):
    """Replaces whatever was captured with a fixed string."""

    def __init__(self, replacement: str):
        self.replacement = replacement

    def format(self, text: str) -> str:
        return self.replacement

    def __repr__(self) -> str:
        return f"LiteralFormatter({self.replacement!r})"


class FunctionFormatter(Formatter):
    def __init__(self, func: Callable[[str], str]):
        self.func = func

    def format(self, text: str) -> str:
        return self.func(text)

    def __repr__(self) -> str:
        return f"FunctionFormatter({getattr(self.func, '__name__', self.func)!r})"


class RuleOption(abc.ABC):
    """Value attached to the nodes produced by a rule."""

    @abc.abstractmethod
    def compute_option(self, text: str, spans: list[Span]) -> Any:
        """Compute the option from the input the matcher was given and its spans."""
        raise NotImplementedError


class LiteralOption(RuleOption):
    def __init__(self, value: Any):
        self.value = value

    def compute_option(self, text: str, spans: list[Span]) -> Any:
        return self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, LiteralOption) and other.value == self.value

    def __hash__(self) -> int:
        return hash(repr(self.value))

    def __repr__(self) -> str:
        return f"LiteralOption({self.value!r})"


class FunctionOption(RuleOption):
    def __init__(self, func: Callable[[str, list[Span]], Any]):
        self.func = func

    def compute_option(self, text: str, spans: list[Span]) -> Any:
        return self.func(text, spans)

    def __repr__(self) -> str:
        return f"FunctionOption({getattr(self.func, '__name__', self.func)!r})"


_ANY_OPTION = object()


@dataclass(frozen=True)
class Excluder:
    """Selects the rules to drop from a derived rule set.

    Without an option every rule with the name is selected. With an option
    only rules of that name carrying an equal literal option are selected.
    """

    name: str
    option: Any = _ANY_OPTION

    @property
    def has_option(self) -> bool:
        return self.option is not _ANY_OPTION

    def selects(self, rule: "Rule") -> bool:
        """Check if this excluder selects the given rule."""
        if rule.name != self.name:
            return False
        if not self.has_option:
            return True
        return isinstance(rule.option, LiteralOption) and rule.option.value == self.option

    def __repr__(self) -> str:
        if self.has_option:
            return f"Excluder({self.name!r}, {self.option!r})"
        return f"Excluder({self.name!r})"


@dataclass(frozen=True)
class Rule:
    """A named matching rule.

    ``exclude`` of None means the default self-exclusion (every rule sharing
    this rule's name is dropped from the child rule set); an empty tuple
    excludes nothing. ``rules`` of None keeps the derived rule set; any tuple,
    including an empty one, replaces it.
    """

    name: str
    matcher: Matcher
    capture: Optional[int] = None
    formatter: Optional[Formatter] = None
    option: Optional[RuleOption] = None
    ignore: bool = False
    skip: bool = False
    exclude: Optional[tuple[Excluder, ...]] = None
    include: tuple["Rule", ...] = field(default_factory=tuple)
    rules: Optional[tuple["Rule", ...]] = None

    def describe(self) -> str:
        """Summarize the rule settings in one line."""
        parts = [f"match={self.matcher.describe()}"]
        if self.capture is not None:
            parts.append(f"capture={self.capture}")
        if self.formatter is not None:
            parts.append("format")
        if isinstance(self.option, LiteralOption):
            parts.append(f"option={self.option.value!r}")
        elif self.option is not None:
            parts.append("option=<function>")
        if self.ignore:
            parts.append("ignore")
        if self.skip:
            parts.append("skip")
        if self.rules is not None:
            parts.append(f"rules=[{', '.join(rule.name for rule in self.rules)}]")
        else:
            if self.exclude is not None:
                parts.append(f"exclude=[{', '.join(repr(e) for e in self.exclude)}]")
            if self.include:
                parts.append(f"include=[{', '.join(rule.name for rule in self.include)}]")
        return ", ".join(parts)


RuleSet = tuple[Rule, ...]
