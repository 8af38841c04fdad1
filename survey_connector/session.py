"""
Session state
Values that carry over from the schema step to the data step of one fetch
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Dict, Optional

from .tables import ROOT_TABLE

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """
    Typed replacement for the string property bag

    Attributes:
        resource_path: OData service path of the form
        table: Table chosen by the user
        row_count: Maximum number of rows to return (None for all rows)
        page_size: Rows requested per call to the server
        skip: Rows to skip before the first returned row
        next_column_id: Counter value for the next schema build
    """
    resource_path: str = ''
    table: str = ROOT_TABLE
    row_count: Optional[int] = None
    page_size: int = 1000
    skip: int = 0
    next_column_id: int = 0

    def to_properties(self) -> Dict[str, str]:
        """Flatten to strings for a key-value store; unset values are omitted"""
        return {
            key: str(value)
            for key, value in asdict(self).items()
            if value is not None
        }

    @classmethod
    def from_properties(cls, properties: Dict[str, Optional[str]]) -> 'SessionState':
        """
        Rebuild state from stored strings

        Args:
            properties: Mapping as produced by to_properties

        Returns:
            SessionState; missing or unparsable numbers fall back to defaults
        """
        state = cls()
        for field in fields(cls):
            raw = properties.get(field.name)
            if raw is None or raw == '':
                continue
            if field.name in ('resource_path', 'table'):
                setattr(state, field.name, raw)
                continue
            try:
                setattr(state, field.name, int(raw))
            except (ValueError, TypeError):
                logger.warning(f"Ignoring invalid session value {field.name}={raw!r}")
        return state


class JsonFileStore:
    """Key-value store of small strings kept in a JSON file"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def get(self, name: str) -> Optional[str]:
        return self._read().get(name)

    def set(self, name: str, value: str) -> None:
        data = self._read()
        data[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def load_state(self) -> SessionState:
        """Read the stored session state"""
        return SessionState.from_properties(self._read())

    def save_state(self, state: SessionState) -> None:
        """Replace the stored session state"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(state.to_properties(), f, indent=2)
        logger.debug(f"Saved session state to {self.path}")
