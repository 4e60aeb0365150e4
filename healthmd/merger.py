"""Section-based merge for re-exporting into an existing Markdown note.

Sections the exporter writes (Sleep, Activity, ...) are replaced with fresh
content, everything else a user added is kept where it was, and sections that
are new this time are appended. Parsing is lossless: joining the frontmatter,
the preamble and every section's heading and body gives back the input.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from . import KNOWN_SECTION_KEYS

logger = structlog.get_logger()

DEFAULT_SECTION_LEVEL = 2

_WS = re.compile(r"\s+")


@dataclass(frozen=True)
class Section:
    heading_line: str  # includes its newline, if the input had one
    key: str
    body: str

    @property
    def text(self) -> str:
        return self.heading_line + self.body


@dataclass(frozen=True)
class ParsedDocument:
    frontmatter: str = ""
    preamble: str = ""
    sections: tuple[Section, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return "".join([self.frontmatter, self.preamble, *(s.text for s in self.sections)])


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping each line's terminator.

    Unlike ``str.splitlines`` a lone ``\\r`` or form feed stays inside its line.
    """
    lines = text.split("\n")
    out = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        out.append(lines[-1])
    return out


def heading_level(line: str) -> int:
    """Number of leading ``#`` when followed by a space, else 0."""
    stripped = line.strip()
    level = len(stripped) - len(stripped.lstrip("#"))
    if level == 0 or level >= len(stripped):
        return 0
    return level if stripped[level] == " " else 0


def normalize_heading(line: str) -> str:
    """``"## 😴 Sleep"`` -> ``"sleep"``; emoji, punctuation and accents are dropped."""
    text = line.rstrip("\r\n").lstrip("# ")
    kept = "".join(ch for ch in text if ch == " " or (ch.isascii() and ch.isalnum()))
    return _WS.sub(" ", kept).strip().lower()


def detect_section_level(text: str, known_keys: Iterable[str] = KNOWN_SECTION_KEYS) -> int:
    known = set(known_keys)
    for line in split_lines(text):
        level = heading_level(line)
        if level and normalize_heading(line) in known:
            return level
    return DEFAULT_SECTION_LEVEL


def _frontmatter_end(lines: list[str]) -> int:
    """Index one past the closing ``---``, or 0 when there is no complete block."""
    if not lines or lines[0].strip() != "---":
        return 0
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            return i + 1
    return 0


def parse(text: str, section_level: int) -> ParsedDocument:
    """Split ``text`` at headings of exactly ``section_level``.

    Deeper or shallower headings stay in the body of the section around them.
    Never fails: text without sections is all preamble.
    """
    lines = split_lines(text)
    start = _frontmatter_end(lines)
    frontmatter = "".join(lines[:start])

    preamble: list[str] = []
    sections: list[Section] = []
    heading: Optional[str] = None
    body: list[str] = []

    for line in lines[start:]:
        if heading_level(line) == section_level:
            if heading is not None:
                sections.append(Section(heading, normalize_heading(heading), "".join(body)))
                body = []
            heading = line
        elif heading is None:
            preamble.append(line)
        else:
            body.append(line)

    if heading is not None:
        sections.append(Section(heading, normalize_heading(heading), "".join(body)))

    return ParsedDocument(frontmatter, "".join(preamble), tuple(sections))


def _with_newline(text: str) -> str:
    return text if not text or text.endswith("\n") else text + "\n"


def merge(existing: str, new: str, known_keys: Iterable[str] = KNOWN_SECTION_KEYS) -> str:
    """Reconcile a previously written note with freshly generated content.

    The result starts with the new frontmatter and preamble. Existing sections
    keep their order; every one whose key also appears in ``new`` is swapped
    for the new version, so a key repeated in ``existing`` (say after an
    append) leaves no stale copy behind. New sections never seen in
    ``existing`` follow at the end in their own order, once per key.
    """
    known_keys = tuple(known_keys)
    old_doc = parse(existing, detect_section_level(existing, known_keys))
    new_doc = parse(new, detect_section_level(new, known_keys))

    # last one wins when the new document repeats a key
    fresh: dict[str, Section] = {}
    for section in new_doc.sections:
        fresh[section.key] = section
    placed: set[str] = set()

    out: list[str] = [new_doc.frontmatter, new_doc.preamble]
    for section in old_doc.sections:
        replacement = fresh.get(section.key)
        if replacement is None:
            out.append(section.text)
        else:
            out.append(replacement.text)
            placed.add(section.key)

    for key, section in fresh.items():
        if key not in placed:
            out.append(section.text)

    merged = _join_sections(out)
    logger.debug(
        "merged_document",
        existing_sections=len(old_doc.sections),
        new_sections=len(new_doc.sections),
    )
    return merged


def _join_sections(parts: list[str]) -> str:
    # a section taken from the end of one document may lack its final newline;
    # give it one before anything else follows so headings stay on their own line
    chunks = [p for p in parts if p]
    return "".join(_with_newline(p) for p in chunks[:-1]) + (chunks[-1] if chunks else "")
