import re
from pathlib import Path

import pytest

from nestparse.config import Settings, get_settings, set_settings

fixtures_path = Path(__file__).parent / "fixtures"
lisp_rules_path = fixtures_path / "lisp.yaml"

VOWEL = r"\A[aeiou]+"
CONSONANT = r"\A[^aeiou]+"
BRACKET = r"\A\((.*?)\)"


def element_matcher(text: str):
    """Match a whole <tag>...</tag> element, nested elements included.

    Spans: the element, the tag name, and the content up to the end of the
    element (closing tag included).
    """
    if not text.startswith("<"):
        return None

    parts = [part for part in text.split("<") if part]
    first = parts[0]
    tag_length = re.match(r".*?>", first).end() + 1

    depth = 1
    length = 0
    for part in parts[1:]:
        if part.startswith("/"):
            if depth == 1:
                length += re.match(r".*?>", part).end() + 1
                break
            depth -= 1
        else:
            depth += 1
        length += len(part) + 1

    length += len(first) + 1
    return [(0, length), (1, tag_length - 2), (tag_length, length - tag_length)]


def tag_name(text, spans):
    """Option callback returning the tag name of an element match."""
    _, (offset, length), _ = spans
    return text[offset:offset + length]


@pytest.fixture
def vowel_consonant_rules():
    return [("vowel", VOWEL), ("consonant", CONSONANT)]


@pytest.fixture
def lisp_rules():
    return [
        ("whitespace", {"match": r"\A\s", "ignore": True}),
        ("expression", {"match": r"\A\((.*)\)", "exclude": []}),
        ("integer", {"match": r"\A\d+", "rules": []}),
        ("atom", {"match": r"\A\S+", "rules": []}),
    ]


@pytest.fixture
def xml_rules():
    return [
        ("whitespace", {"match": r"\A\s", "ignore": True}),
        ("element_end", {"match": r"\A</.*?>", "ignore": True}),
        ("element", {"match": element_matcher, "exclude": [], "option": tag_name}),
        ("value", {"match": r"\A\d+", "rules": []}),
    ]


@pytest.fixture(autouse=True)
def isolated_settings():
    """Give every test fresh default settings and restore the previous ones afterwards."""
    original_settings = get_settings()
    set_settings(Settings())

    yield

    set_settings(original_settings)
