"""
Body extraction for DIP documents.

Pulls the title, reference-link definitions, fenced code blocks and
grammar-diff blocks out of the free-form markdown that follows the
metadata table.
"""

import re
from dataclasses import dataclass, field

TITLE_RE = re.compile(r'^#\s+(.+?)\s*#*\s*$')
REFDEF_RE = re.compile(r'^\s{0,3}\[([^\]]+)\]:\s*<?(\S+?)>?(?:\s+["\'(].*["\')])?\s*$')
FENCE_OPEN_RE = re.compile(r'^\s*(```|~~~)\s*([\w+-]*)')
INLINE_LINK_RE = re.compile(r'^\[([^\]]*)\]\(\s*<?([^)\s>]+)>?[^)]*\)$')
REF_LINK_RE = re.compile(r'^\[([^\]]*)\](?:\[([^\]]*)\])?$')
URL_RE = re.compile(r'^<?(https?://\S+?)>?$')
DIFF_LINE_RE = re.compile(r'^[-+](?![-+])')


@dataclass
class CodeBlock:
    language: str
    content: str
    line_number: int  # line of the opening fence


@dataclass
class GrammarDiff:
    line_number: int
    removed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    context: list[str] = field(default_factory=list)


def _iter_fences(lines: list[str]):
    """Yield (lineno, is_fence_line, in_fence) for each line."""
    in_fence = False
    marker = None
    for lineno, line in enumerate(lines, 1):
        match = FENCE_OPEN_RE.match(line)
        if match and (not in_fence or match.group(1) == marker):
            if in_fence:
                in_fence = False
                marker = None
            else:
                in_fence = True
                marker = match.group(1)
            yield lineno, True, in_fence
            continue
        yield lineno, False, in_fence


def extract_title(text: str) -> str | None:
    """Return the first level-1 heading outside code blocks."""
    lines = text.splitlines()
    for lineno, is_fence, in_fence in _iter_fences(lines):
        if is_fence or in_fence:
            continue
        match = TITLE_RE.match(lines[lineno - 1])
        if match:
            return match.group(1)
    return None


def extract_reference_links(text: str) -> dict[str, str]:
    """Collect `[label]: url` definitions. Labels are case-folded.

    The first definition of a label wins, as in CommonMark.
    """
    refs: dict[str, str] = {}
    lines = text.splitlines()
    for lineno, is_fence, in_fence in _iter_fences(lines):
        if is_fence or in_fence:
            continue
        match = REFDEF_RE.match(lines[lineno - 1])
        if match:
            refs.setdefault(match.group(1).strip().casefold(), match.group(2))
    return refs


def extract_code_blocks(text: str) -> list[CodeBlock]:
    """Return all fenced code blocks. An unclosed fence runs to end of file."""
    lines = text.splitlines()
    blocks = []
    current = None
    current_lines: list[str] = []

    for lineno, is_fence, in_fence in _iter_fences(lines):
        if is_fence and in_fence:
            match = FENCE_OPEN_RE.match(lines[lineno - 1])
            current = CodeBlock(language=match.group(2), content="", line_number=lineno)
            current_lines = []
        elif is_fence and current is not None:
            current.content = "\n".join(current_lines)
            blocks.append(current)
            current = None
        elif in_fence:
            current_lines.append(lines[lineno - 1])

    if current is not None:
        current.content = "\n".join(current_lines)
        blocks.append(current)

    return blocks


def extract_grammar_diffs(text: str) -> list[GrammarDiff]:
    """Return code blocks that read as grammar diffs.

    A block is a grammar diff when it is tagged `diff` or when at least one
    of its lines starts with a single `-` or `+`.
    """
    diffs = []
    for block in extract_code_blocks(text):
        lines = block.content.splitlines()
        if block.language != "diff" and not any(DIFF_LINE_RE.match(l) for l in lines):
            continue

        diff = GrammarDiff(line_number=block.line_number)
        for line in lines:
            if DIFF_LINE_RE.match(line):
                target = diff.removed if line.startswith('-') else diff.added
                target.append(line[1:].strip())
            elif line.strip():
                diff.context.append(line.strip())
        diffs.append(diff)

    return diffs


def resolve_link(value: str, refs: dict[str, str]) -> str | None:
    """Resolve a metadata value to a URL.

    Handles bare URLs, inline links `[text](url)`, full reference links
    `[text][label]` and shortcut references `[label]`.

    Returns:
        URL, or None if value is empty or an unresolvable reference
    """
    value = value.strip()
    if not value or value.upper() in ("N/A", "-"):
        return None

    match = URL_RE.match(value)
    if match:
        return match.group(1)

    match = INLINE_LINK_RE.match(value)
    if match:
        return match.group(2)

    match = REF_LINK_RE.match(value)
    if match:
        label = match.group(2) or match.group(1)
        return refs.get(label.strip().casefold())

    return None
