"""
Row projection
Flattens nested OData submission records into rows of scalar values, one value
per requested column.

A record is plain parsed JSON: None, a scalar, a dict or a list. Missing keys
anywhere along a column's path are not errors, they are how ODK represents an
unanswered or skipped question, so the column's value is simply None.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .converters import convert_value
from .metadata import MetadataIndex
from .paths import FormResource
from .schema import ACCURACY_SUFFIX, Column
from .tables import ID_FIELD, ROOT_TABLE, is_root_table, resolve_repeat_table_key

logger = logging.getLogger(__name__)

JsonValue = Union[None, str, int, float, bool, Dict[str, Any], List[Any]]
Row = List[JsonValue]

# Where a geopoint keeps its accuracy
ACCURACY_PATH = ('properties', 'accuracy')


def navigate(node: JsonValue, segments: Iterable[str]) -> Optional[JsonValue]:
    """
    Follow a path of keys through parsed JSON

    Args:
        node: Record or sub-record to start from
        segments: Keys to follow; numeric segments index into lists

    Returns:
        The value at the end of the path, or None if any step is missing
    """
    current = node
    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return None
    return current


def row_token(record: JsonValue, id_field: str = ID_FIELD) -> Optional[str]:
    """Submission uuid of a record, i.e. the part of its id after the first ':'"""
    value = navigate(record, (id_field,))
    if not isinstance(value, str):
        return None
    return value.split(':', 1)[-1]


def navigation_path(column: Column, index: MetadataIndex, root: bool) -> Tuple[str, ...]:
    """
    Path to follow inside a record of the column's table

    Repeat rows are already scoped to their repeat, so the segments down to
    and including the innermost repeat are dropped. Accuracy companions of a
    geopoint read the nested accuracy value of the point.
    """
    path = tuple(column.path)

    if not root:
        for depth in range(len(path) - 1, 0, -1):
            if index.is_repeat(path[:depth]):
                path = path[depth:]
                break

    if path and path[-1].endswith(ACCURACY_SUFFIX):
        base = path[-1][:-len(ACCURACY_SUFFIX)]
        path = path[:-1] + (base,) + ACCURACY_PATH

    return path


def project_rows(
    columns: Sequence[Column],
    records: Iterable[JsonValue],
    table: str = ROOT_TABLE,
    index: Optional[MetadataIndex] = None,
    resource: Optional[FormResource] = None
) -> List[Row]:
    """
    Project raw records onto the given columns

    Args:
        columns: Requested columns, in the order the values should appear
        records: Raw records of the table (all pages concatenated)
        table: Table the records were read from
        index: Metadata index of the form
        resource: Form resource, needed to build attachment URLs

    Returns:
        One row per record, in record order
    """
    if index is None:
        index = MetadataIndex()

    root = is_root_table(table)
    token_field = ID_FIELD if root else resolve_repeat_table_key(index, table)
    paths = [navigation_path(column, index, root) for column in columns]

    rows: List[Row] = []
    for record in records:
        token = row_token(record, token_field)
        row = []
        for column, path in zip(columns, paths):
            value = navigate(record, path)
            row.append(convert_value(value, column.semantic_type, token, resource))
        rows.append(row)

    logger.debug(f"Projected {len(rows)} rows onto {len(columns)} columns of {table}")
    return rows


def rows_to_dicts(rows: Iterable[Row]) -> List[Dict[str, Row]]:
    """Render rows as [{"values": [...]}]"""
    return [{'values': list(row)} for row in rows]


def rows_to_dataframe(columns: Sequence[Column], rows: Sequence[Row]) -> pd.DataFrame:
    """
    Tabulate projected rows

    Args:
        columns: Columns the rows were projected onto
        rows: Projected rows

    Returns:
        DataFrame with one column per Column, named by column name
    """
    return pd.DataFrame(list(rows), columns=[column.name for column in columns])
