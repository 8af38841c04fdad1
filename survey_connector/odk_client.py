"""
ODK Central Integration Module
Fetches form metadata and OData table pages from ODK Central

The connector core never talks to the server itself; this module is the fetch
service it relies on:
- Field metadata (/fields?odata=true) for schema derivation
- The OData service document, which lists the form's tables
- Table rows, read in pages of at most page_size rows and concatenated

Every request is retried once with a freshly authenticated pyODK client
before the failure is surfaced as a FetchError.
"""

import logging
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

from pyodk import Client
from pyodk.errors import PyODKError

from .errors import FetchError
from .tables import ROOT_TABLE

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class ODKCentralClient:
    """Client for reading one project's forms from ODK Central"""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize ODK Central client

        Args:
            config: Configuration dictionary with ODK settings
        """
        self.config = config
        self.odk_config = config.get('odk', {})

        required_fields = ['base_url', 'username', 'password', 'project_id']
        for field in required_fields:
            if not self.odk_config.get(field):
                raise ValueError(f"Missing required ODK configuration: {field}")

        self.project_id = int(self.odk_config['project_id'])

        try:
            self.client = self._create_pyodk_client()
            logger.info(f"Initialized ODK Central client for {self.odk_config['base_url']}")
        except Exception as e:
            logger.error(f"Failed to initialize ODK Central client: {str(e)}")
            raise

    def _create_pyodk_client(self) -> Client:
        """
        Create pyODK client from a temporary TOML config file

        Returns:
            Configured pyODK Client instance
        """
        config_content = f'''[central]
base_url = "{self.odk_config['base_url']}"
username = "{self.odk_config['username']}"
password = "{self.odk_config['password']}"
default_project_id = {self.project_id}
'''

        with tempfile.NamedTemporaryFile(mode='w', suffix='.toml', delete=False) as f:
            f.write(config_content)
            config_path = f.name

        try:
            return Client(config_path=config_path, project_id=self.project_id)
        finally:
            try:
                os.unlink(config_path)
            except OSError:
                pass

    def _with_reauth(self, description: str, request: Callable[[], Any]) -> Any:
        """
        Run a request, retrying once with a new session if it fails

        Args:
            description: What is being fetched, for logs and errors
            request: Callable performing the request with self.client

        Returns:
            The request's result
        """
        try:
            return request()
        except PyODKError as e:
            logger.warning(f"Request for {description} failed ({str(e)}), re-authenticating")

        try:
            self.client = self._create_pyodk_client()
            return request()
        except PyODKError as e:
            logger.error(f"Request for {description} failed after re-authentication: {str(e)}")
            raise FetchError(description, str(e)) from e

    def fetch(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a path below the API root and parse the JSON body

        Args:
            path: Path relative to the API root, already URL-quoted
            params: Optional query parameters

        Returns:
            Parsed JSON
        """
        def request():
            return self.client.session.response_or_error(
                method="GET",
                url=path,
                params=params or {},
                logger=logger
            )

        response = self._with_reauth(path, request)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Response for {path} is not valid JSON: {str(e)}")
            raise FetchError(path, "response is not valid JSON") from e

    def test_connection(self) -> bool:
        """
        Test connection to ODK Central

        Returns:
            True if connection successful, False otherwise
        """
        try:
            project = self.client.projects.get(self.project_id)
            project_name = getattr(project, 'name', f'Project {self.project_id}')
            logger.info(f"✅ Connection successful to project: {project_name}")
            return True

        except PyODKError as e:
            logger.error(f"❌ ODK Central connection failed: {str(e)}")
            return False

    def get_fields(self, form_id: str) -> List[Dict[str, Any]]:
        """
        Get the form's field descriptors in OData naming

        Args:
            form_id: ODK form ID

        Returns:
            List of {path, name, type, binary} dictionaries
        """
        path = self.client.session.urlformat(
            "projects/{pid}/forms/{fid}/fields", pid=self.project_id, fid=form_id
        )
        fields = self.fetch(path, params={'odata': 'true'})
        logger.info(f"Fetched {len(fields)} field descriptors for {form_id}")
        return fields

    def get_service_document(self, form_id: str) -> Dict[str, Any]:
        """
        Get the OData service document that lists a form's tables

        Args:
            form_id: ODK form ID

        Returns:
            Parsed service document
        """
        path = self.client.session.urlformat(
            "projects/{pid}/forms/{fid}.svc", pid=self.project_id, fid=form_id
        )
        return self.fetch(path)

    def get_submission_count(self, form_id: str, table: str = ROOT_TABLE) -> int:
        """
        Count the rows of a table without downloading them

        Args:
            form_id: ODK form ID
            table: OData table name

        Returns:
            Number of rows reported by the server
        """
        data = self._with_reauth(
            f"{form_id}/{table} count",
            lambda: self.client.submissions.get_table(
                form_id=form_id,
                project_id=self.project_id,
                table_name=table,
                top=0,
                count=True
            )
        )
        return int(data.get('@odata.count', 0))

    def get_table_rows(
        self,
        form_id: str,
        table: str = ROOT_TABLE,
        page_size: int = DEFAULT_PAGE_SIZE,
        row_count: Optional[int] = None,
        skip: int = 0
    ) -> List[Dict[str, Any]]:
        """
        Read a table's rows page by page

        Args:
            form_id: ODK form ID
            table: OData table name
            page_size: Maximum rows per request
            row_count: Maximum rows overall (None for every row)
            skip: Rows to skip before the first one returned

        Returns:
            Raw records of all pages, in server order
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        records: List[Dict[str, Any]] = []
        offset = skip

        while row_count is None or len(records) < row_count:
            top = page_size if row_count is None else min(page_size, row_count - len(records))

            data = self._with_reauth(
                f"{form_id}/{table} rows {offset}-{offset + top}",
                lambda: self.client.submissions.get_table(
                    form_id=form_id,
                    project_id=self.project_id,
                    table_name=table,
                    skip=offset,
                    top=top
                )
            )
            page = data.get('value', []) or []
            records.extend(page)
            offset += len(page)

            logger.debug(f"Fetched {len(page)} rows of {table} (total {len(records)})")

            if len(page) < top:
                break

        logger.info(f"Fetched {len(records)} rows of {form_id}/{table}")
        return records

