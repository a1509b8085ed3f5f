"""Post-processing for raw provider completions.

This module turns a raw model completion into a clean Solidity source
file by running a fixed sequence of line transforms:

- stripping Markdown fences
- removing narrative (non-code) lines
- cutting trailing commentary once the declarations close
- ensuring SPDX + pragma headers
- normalising blank lines

Every transform takes and returns a list of lines and never raises. The
only hard failure is the final check that a contract, interface or
library declaration survived.
"""

from __future__ import annotations

import re
from typing import Callable, List, Sequence, Tuple

from .errors import ValidationError

DEFAULT_LICENSE_HEADER = "// SPDX-License-Identifier: MIT"
DEFAULT_PRAGMA = "pragma solidity ^0.8.20;"
LICENSE_MARKER = "SPDX-License-Identifier"

Lines = List[str]

_FENCE = "```"
_PRAGMA_LINE = re.compile(r"^\s*pragma\s+solidity\b")
_DECLARATION = re.compile(r"^\s*(?:abstract\s+)?(?:contract|interface|library)\s+\w+", re.MULTILINE)

# First line we accept as the beginning of the source.
_CODE_START = re.compile(
    r"^(?://|/\*|pragma\s+solidity\b|import\s|(?:abstract\s+)?(?:contract|interface|library)\s+\w+)"
)

_IDENT = r"[A-Za-z_$][\w$]*"

# File-level declarations that may follow the first closed declaration.
# Matched against the code part of a line (strings and comments removed).
_FOLLOWING_DECLARATION = re.compile(
    r"^(?:"
    rf"(?:abstract\s+)?(?:contract|interface|library)\s+{_IDENT}(?:\s+is\b[\w\s,.()]*)?\s*\{{?"
    rf"|(?:struct|enum)\s+{_IDENT}\s*\{{?"
    rf"|(?:error|event|function)\s+{_IDENT}\s*\(.*"
    r"|using\s+[\w$.]+\s+for\s+.*;"
    rf"|type\s+{_IDENT}\s+is\s+\w+\s*;"
    r"|(?:import|pragma)\b.*;"
    r"|(?:uint\d*|int\d*|bytes\d*|address|bool|string)\b.*\bconstant\b.*;"
    r")$"
)

_SOLIDITY_TOKENS = re.compile(
    r"\b(?:uint\d*|int\d*|bytes\d*|address|bool|string|mapping|memory|calldata|storage|indexed|"
    r"returns|public|private|internal|external|payable|view|pure|override|virtual)\b"
)

_CODE_PUNCTUATION = set("{};=")
_PROSE_FREE_PUNCTUATION = set("(){};=[]")
_CODE_ENDINGS = (";", "{", "}")
_LONG_PROSE_WORDS = 8

NARRATIVE_PATTERNS = [
    # Lead-ins: "Here is the contract:", "Sure! ...", "I'll create ..."
    re.compile(
        r"^(?:here is|here's|here are|below is|below are|the following|this is|"
        r"i'll|i will|i've|i have|sure\b|certainly\b|of course\b)",
        re.IGNORECASE,
    ),
    re.compile(r"^(?:this|the above|the)\s+(?:contract|implementation|code|solution|example)\b", re.IGNORECASE),
    re.compile(
        r"^(?:notes?|important|remember|features|key features|usage|explanation|summary|"
        r"deployment|security considerations|how it works)\s*:",
        re.IGNORECASE,
    ),
    # Markdown headings and bold captions
    re.compile(r"^#{1,6}\s"),
    re.compile(r"^\*\*[^*].*\*\*:?$"),
]

_LIST_ITEM = re.compile(r"^(?:\d+[.)]|[-*•])\s+\S")


def split_lines(text: str) -> Lines:
    """Split text into lines with normalised line endings."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def _scan(line: str, in_block: bool) -> Tuple[str, bool]:
    """Return the code part of a line and the block-comment state after it.

    String literals and comments are dropped from the returned code so that
    braces inside them are not counted.
    """
    code: List[str] = []
    quote = None
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        nxt = line[i + 1] if i + 1 < n else ""
        if in_block:
            if ch == "*" and nxt == "/":
                in_block = False
                i += 2
            else:
                i += 1
            continue
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue
        if ch == "/" and nxt == "/":
            break
        if ch == "/" and nxt == "*":
            in_block = True
            i += 2
            continue
        if ch in ("'", '"'):
            quote = ch
        else:
            code.append(ch)
        i += 1
    return "".join(code), in_block


def is_narrative(stripped: str) -> bool:
    """Heuristic: does a (stripped, non-comment) line read as prose?"""

    if not stripped or stripped.startswith(("//", "/*")):
        return False
    if stripped.endswith(_CODE_ENDINGS):
        return False

    if any(pattern.match(stripped) for pattern in NARRATIVE_PATTERNS):
        return True

    if _LIST_ITEM.match(stripped) and not any(ch in _CODE_PUNCTUATION for ch in stripped):
        return True

    words = stripped.split()
    if (
        len(words) > _LONG_PROSE_WORDS
        and not any(ch in _PROSE_FREE_PUNCTUATION for ch in stripped)
        and not stripped.endswith(",")
        and not _SOLIDITY_TOKENS.search(stripped)
    ):
        return True

    return False


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def strip_code_fences(lines: Sequence[str]) -> Lines:
    """Drop Markdown fence lines (```solidity, ```) and stray fence marks."""
    cleaned: Lines = []
    for line in lines:
        if line.strip().startswith(_FENCE):
            continue
        cleaned.append(line.replace(_FENCE, ""))
    return cleaned


def remove_narrative_lines(lines: Sequence[str]) -> Lines:
    """Drop prose before the first code line and prose interleaved with code.

    Block comment bodies are kept verbatim, and so is any line continuing an
    unfinished statement (``a\\n * b;``).
    """
    kept: Lines = []
    started = False
    in_block = False
    last_code = ""

    for line in lines:
        stripped = line.strip()
        if in_block:
            kept.append(line)
            _, in_block = _scan(line, in_block)
            continue

        if not started:
            if not _CODE_START.match(stripped):
                continue
            started = True
        elif (not last_code or last_code.endswith(_CODE_ENDINGS)) and is_narrative(stripped):
            continue

        kept.append(line)
        code, in_block = _scan(line, in_block)
        code = code.strip()
        if code:
            last_code = code

    return kept


def truncate_after_declaration(lines: Sequence[str]) -> Lines:
    """Cut everything after the declaration once its braces balance.

    Brace depth is tracked from the first contract/interface/library line.
    Once that declaration closes, only blank lines, comments and further
    file-level declarations (another contract, struct, free function,
    constant, ...) may follow; the first other line ends the source.
    """
    kept: Lines = []
    in_block = False
    seen = False
    opened = False
    closed = False
    pending = False
    depth = 0

    for line in lines:
        code, in_block = _scan(line, in_block)
        code = code.strip()

        if closed and depth == 0 and code and not pending and not _FOLLOWING_DECLARATION.match(code):
            break

        kept.append(line)

        if not seen and _DECLARATION.match(code):
            seen = True
        if seen:
            opens = code.count("{")
            depth = max(0, depth + opens - code.count("}"))
            if opens:
                opened = True
            if opened and depth == 0:
                closed = True
        if depth == 0 and code:
            # Multi-line headers ("contract A is\n B,\n C\n{") keep going.
            pending = not code.endswith(_CODE_ENDINGS)

    return kept


def ensure_license_header(lines: Sequence[str]) -> Lines:
    if any(LICENSE_MARKER in line for line in lines):
        return list(lines)
    return [DEFAULT_LICENSE_HEADER] + list(lines)


def ensure_pragma(lines: Sequence[str]) -> Lines:
    """Insert the default pragma right after the license line if missing."""
    if any(_PRAGMA_LINE.match(line) for line in lines):
        return list(lines)

    result = list(lines)
    license_index = next((i for i, line in enumerate(result) if LICENSE_MARKER in line), -1)
    result.insert(license_index + 1, DEFAULT_PRAGMA)
    return result


def collapse_blank_lines(lines: Sequence[str]) -> Lines:
    """Strip trailing whitespace and keep at most one blank line in a row."""
    result: Lines = []
    for line in lines:
        line = line.rstrip()
        if not line and (not result or not result[-1]):
            continue
        result.append(line)
    while result and not result[-1]:
        result.pop()
    return result


SANITIZE_STEPS: Tuple[Callable[[Sequence[str]], Lines], ...] = (
    strip_code_fences,
    remove_narrative_lines,
    truncate_after_declaration,
    ensure_license_header,
    ensure_pragma,
    collapse_blank_lines,
)


def require_declaration(source: str) -> str:
    """The one hard gate: some contract/interface/library must be declared."""
    if not _DECLARATION.search(source):
        raise ValidationError("Generated code does not contain a valid Solidity contract")
    return source


def sanitize(raw: str) -> str:
    """Turn a raw completion into a validated Solidity source body.

    Raises:
        ValidationError: If the input is not text, or no declaration is
            left after cleaning.
    """
    if not isinstance(raw, str):
        raise ValidationError("Invalid contract code received from provider")

    lines = split_lines(raw)
    for step in SANITIZE_STEPS:
        lines = step(lines)

    return require_declaration("\n".join(lines).strip())
