"""
Metadata table codec for DIP documents.

Reads the leading markdown table of a document into ordered rows and
writes it back out. Only the first table in the document is considered.
"""

import re
from dataclasses import dataclass, field

from dipindex.lib.constants import FIELD_KEYS

ROW_RE = re.compile(r'^\s*\|(.*)\|\s*$')
SEPARATOR_CELL_RE = re.compile(r'^\s*:?-{3,}:?\s*$')
FENCE_RE = re.compile(r'^\s*(```|~~~)')

HEADER_KEYS = {"field", "key", "property"}


@dataclass
class TableRow:
    key: str
    value: str
    line_number: int = field(default=0, compare=False)

    @property
    def name(self) -> str:
        """Normalized key: lowercase, trailing colon stripped."""
        return normalize_key(self.key)


@dataclass
class MetadataTable:
    rows: list[TableRow] = field(default_factory=list)
    # Tables compare by rows only; layout is not metadata
    header: tuple[str, str] | None = field(default=None, compare=False)
    start_line: int = field(default=0, compare=False)  # 1-based, first table line
    end_line: int = field(default=0, compare=False)    # 1-based, last table line

    def get(self, name: str) -> str | None:
        """Return the value of the first row whose normalized key is name."""
        name = normalize_key(name)
        for row in self.rows:
            if row.name == name:
                return row.value
        return None

    def row(self, name: str) -> TableRow | None:
        name = normalize_key(name)
        for row in self.rows:
            if row.name == name:
                return row
        return None

    def field_row(self, key: str) -> TableRow | None:
        """First row holding the same field as key, under any of its aliases.

        "Reviews" and "Review Count" resolve to the same row, so this is the
        row a parser reading the first match per field would use.
        """
        name = normalize_key(key)
        field_name = FIELD_KEYS.get(name)
        for row in self.rows:
            if row.name == name or (field_name and FIELD_KEYS.get(row.name) == field_name):
                return row
        return None

    def as_dict(self) -> dict[str, str]:
        """Normalized key -> value. First occurrence wins."""
        result = {}
        for row in self.rows:
            result.setdefault(row.name, row.value)
        return result


def normalize_key(key: str) -> str:
    return key.strip().rstrip(':').strip().lower()


def split_cells(line: str) -> list[str] | None:
    """Split a table line into stripped cells, or None if not a table line."""
    match = ROW_RE.match(line)
    if not match:
        return None
    return [cell.strip() for cell in match.group(1).split('|')]


def _is_separator(cells: list[str]) -> bool:
    return bool(cells) and all(SEPARATOR_CELL_RE.match(c) for c in cells)


def parse_table(text: str) -> MetadataTable | None:
    """Parse the first markdown table in text.

    Tables inside fenced code blocks are ignored. A header row is recognised
    when it is followed by a separator row. Rows with a single cell, or more
    than two, keep the first cell as key and join the rest as value.

    Returns:
        MetadataTable, or None if the document has no table.
    """
    lines = text.splitlines()
    in_fence = False
    start = None

    for lineno, line in enumerate(lines, 1):
        if FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        if split_cells(line) is not None:
            start = lineno
            break

    if start is None:
        return None

    table = MetadataTable(start_line=start, end_line=start)
    block = []
    for lineno in range(start, len(lines) + 1):
        cells = split_cells(lines[lineno - 1])
        if cells is None:
            break
        block.append((lineno, cells))
        table.end_line = lineno

    # Header row is only a header when a separator follows it
    if len(block) >= 2 and _is_separator(block[1][1]):
        header_cells = block[0][1]
        table.header = (header_cells[0], " | ".join(header_cells[1:]))
        block = block[2:]

    for lineno, cells in block:
        if _is_separator(cells):
            continue
        key = cells[0]
        value = " | ".join(cells[1:]) if len(cells) > 1 else ""
        if not key and not value:
            continue
        table.rows.append(TableRow(key=key, value=value, line_number=lineno))

    return table


def render_table(table: MetadataTable) -> str:
    """Render a MetadataTable as an aligned markdown table."""
    header = table.header or ("Field", "Value")
    key_width = max([len(header[0])] + [len(r.key) for r in table.rows] + [3])
    value_width = max([len(header[1])] + [len(r.value) for r in table.rows] + [3])

    lines = [
        f"| {header[0]:<{key_width}} | {header[1]:<{value_width}} |",
        f"|{'-' * (key_width + 2)}|{'-' * (value_width + 2)}|",
    ]
    for row in table.rows:
        lines.append(f"| {row.key:<{key_width}} | {row.value:<{value_width}} |")

    return "\n".join(lines) + "\n"


def replace_value(text: str, key: str, value: str) -> str:
    """Rewrite the value of one metadata row in a document.

    The row is found by field, so "Review Count" rewrites an existing
    "Reviews:" row. Other rows and the rest of the document are preserved.
    If the field is missing it is appended as the last row of the table,
    using the key style of the existing rows (trailing colon or not).

    Raises:
        ValueError: if the document has no metadata table
    """
    table = parse_table(text)
    if table is None:
        raise ValueError("Document has no metadata table")

    lines = text.splitlines()
    trailing_newline = text.endswith('\n')
    row = table.field_row(key)

    if row is not None:
        lines[row.line_number - 1] = f"| {row.key} | {value} |"
    else:
        use_colon = any(r.key.endswith(':') for r in table.rows)
        new_key = key.strip().rstrip(':') + (':' if use_colon else '')
        lines.insert(table.end_line, f"| {new_key} | {value} |")

    result = "\n".join(lines)
    return result + "\n" if trailing_newline else result
