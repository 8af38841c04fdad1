"""
Table resolution
Works out which OData table a form field belongs to and how repeat tables
link back to their parent rows.

ODK Central exposes one table for the submissions themselves ("Submissions")
and one extra table per repeat, named by the dotted path to that repeat
(e.g. "Submissions.household.member"). Groups are transparent: their fields
stay in the enclosing table, though a group may still appear inside a table
name when a repeat sits below it.
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence

from .metadata import MetadataIndex, split_path

logger = logging.getLogger(__name__)

ROOT_TABLE = 'Submissions'
ID_FIELD = '__id'
LINK_PREFIX = '__Submissions'
LINK_SUFFIX = 'id'


def is_root_table(table: str) -> bool:
    """True for the sentinel root table (also for an empty table name)"""
    return not table or table == ROOT_TABLE


def table_segments(table: str) -> List[str]:
    """Segments of a dotted table name with the root marker removed"""
    segments = [segment for segment in (table or '').split('.') if segment]
    if segments and segments[0] == ROOT_TABLE:
        segments = segments[1:]
    return segments


def qualify_table(chain: str) -> str:
    """Turn a field's table chain back into a dotted OData table name"""
    return f"{ROOT_TABLE}.{chain}" if chain else ROOT_TABLE


def _strip_trailing_groups(index: MetadataIndex, segments: Sequence[str]) -> List[str]:
    remaining = list(segments)
    while remaining and index.is_group(remaining):
        remaining.pop()
    return remaining


def classify_field_table(index: MetadataIndex, field_path: str) -> str:
    """
    Find the table chain that owns a field

    Trailing segments are dropped while they are leaves, unknown nodes or
    groups, which leaves the path of the innermost enclosing repeat.

    Args:
        index: Metadata index for the form
        field_path: Slash-separated field path, e.g. /household/member/age

    Returns:
        Dotted chain of the owning repeat ("" for the root table)
    """
    segments = list(split_path(field_path))
    while segments and (segments not in index or index.is_group(segments)):
        segments.pop()
    return '.'.join(segments)


def table_chain(index: MetadataIndex, table: str) -> str:
    """Comparison key of a requested table: its chain without trailing groups"""
    return '.'.join(_strip_trailing_groups(index, table_segments(table)))


def resolve_repeat_table_key(index: MetadataIndex, table: str) -> str:
    """
    Name of the column that links a repeat table's rows to their parent row

    The repeat's own name and any groups directly above it are removed from
    the table name; what remains identifies the parent table. Repeats with
    the same name at different depths therefore get distinct link columns.

    Args:
        index: Metadata index for the form
        table: Dotted table name such as Submissions.club.person

    Returns:
        "__Submissions-id" or "__Submissions-<parent-chain>-id"
    """
    parent = _strip_trailing_groups(index, table_segments(table)[:-1])
    if not parent:
        return f"{LINK_PREFIX}-{LINK_SUFFIX}"
    return f"{LINK_PREFIX}-{'-'.join(parent)}-{LINK_SUFFIX}"


def list_tables(service_document: Dict[str, Any]) -> List[str]:
    """
    Extract table names from a form's OData service document

    Args:
        service_document: Parsed JSON of GET .../forms/<formId>.svc

    Returns:
        Entity set names, root table first
    """
    tables = []
    for entry in service_document.get('value', []) or []:
        if not isinstance(entry, dict):
            continue
        if entry.get('kind', 'EntitySet') != 'EntitySet':
            continue
        name = entry.get('name') or entry.get('url')
        if name and name not in tables:
            tables.append(name)

    if ROOT_TABLE in tables:
        tables.remove(ROOT_TABLE)
        tables.insert(0, ROOT_TABLE)

    logger.debug(f"Service document lists {len(tables)} tables: {tables}")
    return tables


def known_table_chains(tables: Iterable[str]) -> List[str]:
    """Raw dotted chains of every non-root table"""
    return ['.'.join(table_segments(table)) for table in tables if not is_root_table(table)]
