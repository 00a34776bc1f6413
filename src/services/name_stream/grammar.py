"""
Record grammar for business name blocks in model output.

A block starts at a ``Name:`` header at the beginning of a line and runs to
the next header. Once every mandatory field line (``Pronounced:``, ``Why:``)
is complete, the first blank line after them terminates the block early, so
trailing chatter after a record never leaks into it.

The incremental extractor and the terminal reconciler both split text with
``iter_blocks`` and parse bodies with ``parse_block``; the only difference is
that the reconciler runs in ``final`` mode where every block is closed.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from services.name_stream.models import DOMAIN_SUFFIXES, BusinessName, SocialHandles

logger = logging.getLogger(__name__)

_EMPHASIS = r"(?:[*_]{1,3})?"

_BULLET = r"(?:[^\w\s]+[ \t]*)?"

HEADER_PATTERN = re.compile(
    r"^[ \t]*" + _BULLET + r"(?:\d+[.)][ \t]*)?" + _EMPHASIS
    + r"[ \t]*name[ \t]*" + _EMPHASIS + r"[ \t]*:[ \t]*",
    re.IGNORECASE | re.MULTILINE,
)

PRONUNCIATION_LABELS = ("pronounced", "pronunciation")
DESCRIPTION_LABELS = ("why", "description")


def _field_pattern(labels: tuple) -> re.Pattern:
    return re.compile(
        r"^[ \t]*" + _BULLET + _EMPHASIS
        + r"[ \t]*(?:" + "|".join(labels) + r")[ \t]*" + _EMPHASIS
        + r"[ \t]*:(?P<value>[^\r\n]*)",
        re.IGNORECASE | re.MULTILINE,
    )


PRONUNCIATION_PATTERN = _field_pattern(PRONUNCIATION_LABELS)
DESCRIPTION_PATTERN = _field_pattern(DESCRIPTION_LABELS)
FIELD_PATTERNS = (PRONUNCIATION_PATTERN, DESCRIPTION_PATTERN)

BLANK_LINE_PATTERN = re.compile(r"\n[ \t\r]*\n")
NEXT_LINE_PATTERN = re.compile(r"[ \t\r\n]*(?P<line>[^\n]*)(?P<newline>\n)?")
ENUMERATION_PATTERN = re.compile(r"^\d+[.)](?:\s+|$)")
BARE_INTEGER_PATTERN = re.compile(r"^\d+$")
NON_ALPHANUMERIC_PATTERN = re.compile(r"[^a-z0-9]")

HANDLE_PATTERNS = {
    "twitter": re.compile(r"@([A-Za-z0-9_]+)\s*\((?:Twitter|X)\)", re.IGNORECASE),
    "instagram": re.compile(r"@([A-Za-z0-9_]+)\s*\(Instagram\)", re.IGNORECASE),
    "facebook": re.compile(r"@([A-Za-z0-9_]+)\s*\(Facebook\)", re.IGNORECASE),
}

HANDLE_LABEL_PATTERN = re.compile(
    r"^[ \t]*" + _BULLET + _EMPHASIS
    + r"[ \t]*(?:social(?:[ \t]+media)?[ \t]+)?handles?[ \t]*" + _EMPHASIS + r"[ \t]*:",
    re.IGNORECASE,
)

EMPHASIS_CHARS = "*_`~"
MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class RecordGrammar:
    """Which record fields must be present before a block may be emitted."""
    require_pronunciation: bool = True
    require_description: bool = True

    @property
    def mandatory_patterns(self) -> List[re.Pattern]:
        patterns = []
        if self.require_pronunciation:
            patterns.append(PRONUNCIATION_PATTERN)
        if self.require_description:
            patterns.append(DESCRIPTION_PATTERN)
        return patterns


DEFAULT_GRAMMAR = RecordGrammar()


@dataclass(frozen=True)
class Block:
    """A header-delimited region of text.

    ``end`` is the absolute offset where the block's body stops. ``closed``
    means no later text can change the body.
    """
    start: int
    end: int
    body: str
    closed: bool


def is_handle_line(line: str) -> bool:
    """A ``Handles:`` label or a line carrying at least one ``@handle (Channel)``."""
    if HANDLE_LABEL_PATTERN.match(line):
        return True
    return any(pattern.search(line) for pattern in HANDLE_PATTERNS.values())


def find_terminator(
    body: str,
    grammar: RecordGrammar = DEFAULT_GRAMMAR,
    complete: bool = False,
) -> Optional[int]:
    """Offset of the blank line closing ``body``, or None while it cannot be decided yet.

    A blank line followed by handle lines does not close the block; the search
    continues after them. Unless ``complete`` is set, the line after a blank
    line must be whole before it can be classified.
    """
    anchors = []
    for pattern in grammar.mandatory_patterns:
        match = pattern.search(body)
        if match is None or match.end() >= len(body):
            return None
        anchors.append(match.end())

    if not anchors:
        first_line_end = body.find("\n")
        if first_line_end < 0:
            return None
        anchors.append(first_line_end)

    pos = max(anchors)
    while True:
        blank = BLANK_LINE_PATTERN.search(body, pos)
        if blank is None:
            return None

        following = NEXT_LINE_PATTERN.match(body, blank.end())
        line = following.group("line")
        if following.group("newline") is None and not complete:
            return None
        if not line.strip() or not is_handle_line(line):
            return blank.start()
        pos = following.end("line")


def iter_blocks(
    text: str,
    grammar: RecordGrammar = DEFAULT_GRAMMAR,
    pos: int = 0,
    final: bool = False,
) -> Iterator[Block]:
    """Split ``text`` (from ``pos``) into header-delimited blocks.

    With ``final=False`` the last block stays open until a following header
    or its terminator shows up; with ``final=True`` the text is complete and
    every block is closed.
    """
    headers = list(HEADER_PATTERN.finditer(text, pos))
    for index, header in enumerate(headers):
        body_start = header.end()
        if index + 1 < len(headers):
            limit = headers[index + 1].start()
            closed = True
        else:
            limit = len(text)
            closed = final

        body = text[body_start:limit]
        cut = find_terminator(body, grammar, complete=closed)
        if cut is not None:
            body = body[:cut]
            closed = True

        yield Block(start=header.start(), end=body_start + len(body), body=body, closed=closed)


def _strip_emphasis(value: str) -> str:
    return value.strip(EMPHASIS_CHARS + " \t\r\n")


def clean_name(raw: str) -> str:
    """Strip markdown emphasis and leading enumeration such as ``1.`` or ``12)``."""
    name = _strip_emphasis(raw)
    name = ENUMERATION_PATTERN.sub("", name)
    return _strip_emphasis(name)


def is_valid_name(name: str) -> bool:
    return len(name) >= MIN_NAME_LENGTH and not BARE_INTEGER_PATTERN.match(name)


def normalize_name(name: str) -> str:
    return NON_ALPHANUMERIC_PATTERN.sub("", name.lower())


def build_domains(normalized: str) -> List[str]:
    if not normalized:
        return []
    return [f"{normalized}{suffix}" for suffix in DOMAIN_SUFFIXES]


def _is_field_line(line: str) -> bool:
    return any(pattern.match(line) for pattern in FIELD_PATTERNS)


def _extract_name(body: str) -> str:
    lines = body.splitlines()
    if not lines:
        return ""

    name = clean_name(lines[0])
    if name and not BARE_INTEGER_PATTERN.match(name):
        return name

    for line in lines[1:]:
        if not line.strip() or _is_field_line(line):
            continue
        return clean_name(line)
    return ""


def _extract_field(pattern: re.Pattern, body: str) -> str:
    match = pattern.search(body)
    return _strip_emphasis(match.group("value")) if match else ""


def _extract_handles(body: str, default: str) -> SocialHandles:
    found = {}
    for channel, pattern in HANDLE_PATTERNS.items():
        match = pattern.search(body)
        found[channel] = match.group(1) if match else default
    return SocialHandles(**found)


def parse_block(body: str, grammar: RecordGrammar = DEFAULT_GRAMMAR) -> Optional[BusinessName]:
    """Parse one block body into a record, or None when the block is malformed."""
    name = _extract_name(body)
    if not is_valid_name(name):
        logger.debug(f"Rejected block with invalid name: {name!r}")
        return None

    pronunciation = _extract_field(PRONUNCIATION_PATTERN, body)
    description = _extract_field(DESCRIPTION_PATTERN, body)

    if grammar.require_pronunciation and not pronunciation:
        logger.debug(f"Rejected block {name!r}: missing pronunciation")
        return None
    if grammar.require_description and not description:
        logger.debug(f"Rejected block {name!r}: missing description")
        return None

    normalized = normalize_name(name)
    return BusinessName(
        name=name,
        pronunciation=pronunciation,
        description=description,
        social_handles=_extract_handles(body, normalized),
        domains=build_domains(normalized),
    )


def parse_business_names(
    text: str,
    count: Optional[int] = None,
    grammar: RecordGrammar = DEFAULT_GRAMMAR,
) -> List[BusinessName]:
    """Parse every complete record in a finished response, in block order."""
    names = []
    for block in iter_blocks(text, grammar, final=True):
        record = parse_block(block.body, grammar)
        if record is not None:
            names.append(record)
    return names if count is None else names[:count]
