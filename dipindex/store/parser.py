"""
DIP document parser.

Turns one markdown document into a Proposal, or raises ParseError when a
required field (DIP, Status) is missing or malformed.
"""

import logging
from pathlib import Path
from typing import Optional

from dipindex.lib.body import extract_reference_links, extract_title, resolve_link
from dipindex.lib.constants import DIP_ID_PATTERN, FIELD_KEYS
from dipindex.lib.mdtable import MetadataTable, TableRow, parse_table
from dipindex.lib.status_config import StatusConfig
from dipindex.lib.validate import ValidationError, validate
from dipindex.store.errors import ParseError
from dipindex.store.models import Proposal

logger = logging.getLogger(__name__)

# Field name -> key shown in error messages
DISPLAY_KEYS = {
    "id": "DIP",
    "author": "Author",
    "review_count": "Review Count",
    "implementation": "Implementation",
    "status": "Status",
    "title": "Title",
}

EMPTY_VALUES = ("", "n/a", "-", "none")


def _field_rows(table: MetadataTable) -> dict[str, TableRow]:
    """Map Proposal field names to the first matching table row."""
    rows = {}
    for row in table.rows:
        field_name = FIELD_KEYS.get(row.name)
        if field_name and field_name not in rows:
            rows[field_name] = row
    return rows


def _body_after(text: str, table: MetadataTable) -> str:
    lines = text.splitlines()
    return "\n".join(lines[table.end_line:]).strip("\n")


def parse_id(value: str) -> int | None:
    match = DIP_ID_PATTERN.match(value.strip())
    return int(match.group(1)) if match else None


def parse_proposal(
    path: Optional[Path],
    text: str,
    statuses: Optional[StatusConfig] = None,
    strict_status: bool = True,
) -> Proposal:
    """Parse one DIP document.

    Args:
        path: Source file (used for errors and the fallback title)
        text: Document content
        statuses: Status vocabulary (defaults to built-in statuses)
        strict_status: If False, unknown statuses are kept verbatim

    Raises:
        ParseError: if DIP or Status is missing or malformed
    """
    statuses = statuses or StatusConfig()

    table = parse_table(text)
    if table is None:
        raise ParseError(path, "DIP", "no metadata table")

    rows = _field_rows(table)

    id_row = rows.get("id")
    if id_row is None or not id_row.value.strip():
        raise ParseError(path, "DIP", "missing identifier", table.start_line)
    dip_id = parse_id(id_row.value)
    if dip_id is None:
        raise ParseError(path, "DIP", f"malformed identifier '{id_row.value}'", id_row.line_number)

    status_row = rows.get("status")
    if status_row is None or not status_row.value.strip():
        raise ParseError(path, "Status", "missing status", table.start_line)
    status = statuses.normalize(status_row.value)
    if status is None:
        if strict_status:
            raise ParseError(path, "Status", f"unknown status '{status_row.value}'", status_row.line_number)
        status = status_row.value.strip()
        logger.debug(f"{path}: keeping unknown status '{status}'")

    review_count = None
    review_row = rows.get("review_count")
    if review_row is not None and review_row.value.strip().lower() not in EMPTY_VALUES:
        raw = review_row.value.strip()
        if raw.isdigit():
            review_count = int(raw)
        else:
            logger.warning(f"{path}:{review_row.line_number}: ignoring malformed Review Count '{raw}'")

    implementation = None
    impl_row = rows.get("implementation")
    if impl_row is not None and impl_row.value.strip().lower() not in EMPTY_VALUES:
        implementation = resolve_link(impl_row.value, extract_reference_links(text))
        if implementation is None and impl_row.value.strip().startswith('['):
            logger.warning(f"{path}:{impl_row.line_number}: unresolved Implementation link '{impl_row.value}'")

    author_row = rows.get("author")
    title = extract_title(text) or (path.stem if path else f"DIP{dip_id}")

    data = {
        "id": dip_id,
        "title": title,
        "author": author_row.value.strip() if author_row else "",
        "status": status,
        "review_count": review_count,
        "implementation": implementation,
    }

    try:
        validate(data, "proposal")
    except ValidationError as e:
        field_name = DISPLAY_KEYS.get(e.path, e.path)
        row = rows.get(e.path)
        raise ParseError(path, field_name, e.message, row.line_number if row else None) from None

    return Proposal(
        **data,
        body=_body_after(text, table),
        path=path,
        metadata={row.key.rstrip(':').strip(): row.value for row in table.rows},
    )
