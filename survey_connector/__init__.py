"""
Survey Connector Package
Flattens ODK Central OData forms into typed tables for visualization clients
"""

__version__ = "1.0.0"

from .config import load_config, get_project_root
from .utils import setup_logging
from .paths import FormResource, parse_resource_path
from .metadata import FieldDescriptor, MetadataIndex
from .tables import classify_field_table, resolve_repeat_table_key, list_tables
from .schema import Column, SchemaResult, build_schema, select_columns
from .rows import navigate, project_rows
from .converters import convert_value
from .session import SessionState

__all__ = [
    "load_config",
    "get_project_root",
    "setup_logging",
    "FormResource",
    "parse_resource_path",
    "FieldDescriptor",
    "MetadataIndex",
    "classify_field_table",
    "resolve_repeat_table_key",
    "list_tables",
    "Column",
    "SchemaResult",
    "build_schema",
    "select_columns",
    "navigate",
    "project_rows",
    "convert_value",
    "SessionState",
]
