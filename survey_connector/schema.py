"""
Schema derivation
Builds the ordered, typed column list of one OData table from the form's
field metadata.

Column ids come from a counter that the caller threads through successive
builds (SchemaResult.next_id), so a schema request and the data request that
follows it produce identical ids for the same table.
"""

import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .metadata import INSTANCE_ID, FieldDescriptor, MetadataIndex, coerce_descriptors
from .tables import (
    ID_FIELD,
    classify_field_table,
    is_root_table,
    known_table_chains,
    resolve_repeat_table_key,
    table_chain,
)

logger = logging.getLogger(__name__)

# Semantic types understood by the visualization client
TEXT = 'text'
NUMBER = 'number'
BOOLEAN = 'boolean'
DATE = 'date'
DATETIME = 'datetime'
GEO = 'geo-coordinate'
URL = 'url'

DIMENSION = 'dimension'
METRIC = 'metric'

ACCURACY_SUFFIX = '-accuracy'

# OData type -> (concept role, semantic type)
ODATA_TYPES: Dict[str, Tuple[str, str]] = {
    'int': (METRIC, NUMBER),
    'string': (DIMENSION, TEXT),
    'boolean': (METRIC, BOOLEAN),
    'decimal': (METRIC, NUMBER),
    'date': (DIMENSION, DATE),
    'time': (DIMENSION, TEXT),
    'dateTime': (DIMENSION, DATETIME),
    'geopoint': (DIMENSION, GEO),
    'geotrace': (DIMENSION, TEXT),
    'geoshape': (DIMENSION, TEXT),
    'binary': (DIMENSION, URL),
    'barcode': (DIMENSION, TEXT),
    'intent': (DIMENSION, TEXT),
}

DEFAULT_TYPE = (DIMENSION, TEXT)

ROOT_SYSTEM_COLUMNS = [
    (('__system', 'submitterName'), TEXT),
    (('__system', 'reviewState'), TEXT),
    ((ID_FIELD,), TEXT),
    (('__system', 'submissionDate'), DATETIME),
]


class Column(NamedTuple):
    """One flattened column of a table"""
    id: str
    name: str
    path: Tuple[str, ...]
    semantic_type: str
    concept_role: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.semantic_type,
            'conceptRole': self.concept_role,
        }


class SchemaResult(NamedTuple):
    """Columns of a table plus the counter value for the next build"""
    columns: List[Column]
    next_id: int


def odata_type_info(odata_type: str) -> Tuple[str, str]:
    """Concept role and semantic type of an OData type (text dimension if unknown)"""
    info = ODATA_TYPES.get(odata_type)
    if info is None:
        logger.debug(f"Unrecognised OData type '{odata_type}', treating as text")
        return DEFAULT_TYPE
    return info


def column_name(path: Sequence[str]) -> str:
    """Flattened display name of a column path"""
    return '/'.join(path).replace('-', '_')


class _ColumnCounter:
    """Sequential column ids for one schema build"""

    def __init__(self, start: int):
        self.value = start

    def take(self) -> str:
        current = self.value
        self.value += 1
        return str(current)


def _belongs_to_known_table(field: FieldDescriptor, known_chains: Sequence[str]) -> bool:
    parent = '.'.join(field.segments[:-1])
    return any(parent == chain or parent.startswith(chain + '.') for chain in known_chains)


def build_schema(
    fields: Iterable[Any],
    table: str,
    known_tables: Optional[Iterable[str]] = None,
    start_id: int = 0
) -> SchemaResult:
    """
    Build the ordered column list for a table

    Args:
        fields: Field descriptors from the server, in server order
        table: Requested table, e.g. "Submissions" or "Submissions.household.member"
        known_tables: Every table listed by the service document
        start_id: First column id to hand out

    Returns:
        SchemaResult with the columns and the next unused id
    """
    descriptors = coerce_descriptors(fields)
    index = MetadataIndex.build(descriptors)
    counter = _ColumnCounter(start_id)
    columns: List[Column] = []

    root = is_root_table(table)
    known_chains = known_table_chains(known_tables or [])
    requested_chain = '' if root else table_chain(index, table)

    if root:
        for path, semantic_type in ROOT_SYSTEM_COLUMNS:
            columns.append(Column(counter.take(), column_name(path), path, semantic_type, DIMENSION))
    else:
        link_path = (resolve_repeat_table_key(index, table),)
        columns.append(Column(counter.take(), link_path[0], link_path, TEXT, DIMENSION))
        columns.append(Column(counter.take(), ID_FIELD, (ID_FIELD,), TEXT, DIMENSION))

    field_count = 0
    for field in descriptors:
        if field.is_structural or field.name == INSTANCE_ID:
            continue

        if classify_field_table(index, field.path) != requested_chain:
            continue
        if root and _belongs_to_known_table(field, known_chains):
            continue

        concept_role, semantic_type = odata_type_info(field.type)
        path = field.segments
        name = column_name(path)
        columns.append(Column(counter.take(), name, path, semantic_type, concept_role))
        field_count += 1

        if semantic_type == GEO:
            accuracy_path = path[:-1] + (path[-1] + ACCURACY_SUFFIX,)
            columns.append(Column(counter.take(), name + ACCURACY_SUFFIX, accuracy_path, NUMBER, METRIC))

    if not root and field_count == 0:
        logger.warning(f"Table '{table}' matches no form fields, returning an empty schema")
        return SchemaResult(columns=[], next_id=start_id)

    logger.info(f"Built schema for {table or 'Submissions'}: {len(columns)} columns "
                f"({field_count} form fields)")
    return SchemaResult(columns=columns, next_id=counter.value)


def select_columns(columns: Sequence[Column], names: Optional[Iterable[str]]) -> List[Column]:
    """
    Pick columns by name, in the order the names are given

    Args:
        columns: Full schema of the table
        names: Requested column names; None selects every column

    Returns:
        Selected columns
    """
    if names is None:
        return list(columns)

    by_name = {column.name: column for column in columns}
    selected = []
    for name in names:
        column = by_name.get(name)
        if column is None:
            logger.warning(f"Requested column '{name}' is not in the schema, skipping")
            continue
        selected.append(column)
    return selected


def schema_to_dicts(columns: Iterable[Column]) -> List[Dict[str, str]]:
    """Render columns as [{id, name, type, conceptRole}]"""
    return [column.to_dict() for column in columns]
