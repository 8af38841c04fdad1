"""
Exception types for the survey connector
"""


class ConnectorError(Exception):
    """Base class for survey connector errors"""


class MalformedResourceIdentifier(ConnectorError, ValueError):
    """Raised when a form resource path does not have the expected shape"""

    def __init__(self, resource_path: str, reason: str):
        self.resource_path = resource_path
        self.reason = reason
        super().__init__(f"Malformed form resource '{resource_path}': {reason}")


class FetchError(ConnectorError):
    """Raised when ODK Central cannot be reached or returns an unusable payload"""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to fetch {path}: {message}")
