"""
Table Connector
Request/response facade used by a visualization client: list a form's tables,
describe one table's columns, and return its rows.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .config import load_config
from .metadata import MetadataIndex, coerce_descriptors
from .odk_client import DEFAULT_PAGE_SIZE, ODKCentralClient
from .paths import FormResource, build_resource_path, parse_resource_path
from .rows import Row, project_rows, rows_to_dataframe, rows_to_dicts
from .schema import Column, build_schema, schema_to_dicts, select_columns
from .session import SessionState
from .tables import ROOT_TABLE, list_tables

logger = logging.getLogger(__name__)


class TableConnector:
    """Serves schema and data requests for one form"""

    def __init__(self, client: ODKCentralClient, state: SessionState):
        """
        Initialize the connector

        Args:
            client: Fetch service for ODK Central
            state: Session state shared by the schema and data steps
        """
        self.client = client
        self.state = state
        self.next_column_id = state.next_column_id
        self.resource: FormResource = parse_resource_path(state.resource_path)

    def get_config(self) -> Dict[str, Any]:
        """
        Describe the choices a user makes before fetching data

        Returns:
            Dictionary with the form resource and its tables
        """
        tables = self._tables()
        return {
            'resource_path': self.resource.resource_path,
            'project_id': self.resource.project_id,
            'form_id': self.resource.form_id,
            'tables': tables,
            'table': self.state.table,
        }

    def _tables(self) -> List[str]:
        return list_tables(self.client.get_service_document(self.resource.form_id))

    def _build(self, fields: List[Any], table: str) -> List[Column]:
        """
        Build a table's columns from the session's id seed

        The seed in the session state stays fixed, so the schema and data steps
        hand out the same ids. The first id left unused by the latest build is
        kept in next_column_id for callers that add columns of their own.
        """
        result = build_schema(fields, table, self._tables(), start_id=self.state.next_column_id)
        self.next_column_id = result.next_id
        return result.columns

    def get_schema(self, table: Optional[str] = None) -> List[Dict[str, str]]:
        """
        Describe the columns of a table

        Args:
            table: Table to describe; defaults to the session's table

        Returns:
            Columns as [{id, name, type, conceptRole}]
        """
        if table is not None:
            self.state.table = table

        fields = self.client.get_fields(self.resource.form_id)
        return schema_to_dicts(self._build(fields, self.state.table))

    def get_data(self, field_names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Fetch and flatten the rows of the session's table

        Args:
            field_names: Requested column names, in order; None for every column

        Returns:
            Dictionary with the requested schema and rows as [{values: [...]}]
        """
        columns, rows = self._fetch_rows(field_names)
        return {
            'schema': schema_to_dicts(columns),
            'rows': rows_to_dicts(rows),
        }

    def get_dataframe(self, field_names: Optional[Iterable[str]] = None) -> pd.DataFrame:
        """Same as get_data, tabulated as a DataFrame named by column name"""
        columns, rows = self._fetch_rows(field_names)
        return rows_to_dataframe(columns, rows)

    def _fetch_rows(self, field_names: Optional[Iterable[str]]) -> Tuple[List[Column], List[Row]]:
        table = self.state.table
        fields = coerce_descriptors(self.client.get_fields(self.resource.form_id))
        columns = select_columns(self._build(fields, table), field_names)

        records = self.client.get_table_rows(
            self.resource.form_id,
            table=table,
            page_size=self.state.page_size,
            row_count=self.state.row_count,
            skip=self.state.skip
        )

        rows = project_rows(
            columns,
            records,
            table=table,
            index=MetadataIndex.build(fields),
            resource=self.resource
        )

        logger.info(f"Returning {len(rows)} rows x {len(columns)} columns for {table}")
        return columns, rows


def state_from_config(config: Dict[str, Any]) -> SessionState:
    """
    Initial session state from configuration

    Args:
        config: Loaded configuration

    Returns:
        SessionState for the configured form
    """
    odk_config = config.get('odk', {})
    connector_config = config.get('connector', {}) or {}

    resource_path = odk_config.get('resource_path') or build_resource_path(
        f"{odk_config['base_url'].rstrip('/')}/v1",
        odk_config['project_id'],
        odk_config['form_id']
    )

    return SessionState(
        resource_path=resource_path,
        table=connector_config.get('table') or ROOT_TABLE,
        row_count=connector_config.get('row_count'),
        page_size=connector_config.get('page_size') or DEFAULT_PAGE_SIZE,
        skip=connector_config.get('skip') or 0,
    )


def create_connector(
    config_path: Optional[str] = None,
    state: Optional[SessionState] = None
) -> TableConnector:
    """
    Factory function to create a table connector

    Args:
        config_path: Optional path to configuration file
        state: Session state to resume; built from configuration if omitted

    Returns:
        Configured TableConnector
    """
    config = load_config(config_path)
    if state is None:
        state = state_from_config(config)
    return TableConnector(ODKCentralClient(config), state)
