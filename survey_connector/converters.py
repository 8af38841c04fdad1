"""
Value conversion
Turns raw OData values into the scalar representation each semantic type expects
"""

import json
from typing import Any, Optional

from .paths import FormResource
from .schema import DATE, DATETIME, GEO, TEXT, URL


def _convert_url(value: Any, row_token: Optional[str], resource: Optional[FormResource]) -> Any:
    if resource is None or row_token is None:
        return value
    return resource.media_url(row_token, value)


def _convert_datetime(value: Any) -> Any:
    # Hour precision only: 2021-03-17T12:34:56 -> 20210317T12
    if not isinstance(value, str):
        return value
    return value.replace('-', '').split(':', 1)[0]


def _convert_date(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.replace('-', '')


def _format_coordinate(coordinate: Any) -> str:
    if isinstance(coordinate, float) and coordinate.is_integer():
        return str(int(coordinate))
    return str(coordinate)


def _convert_geopoint(value: Any) -> Any:
    coordinates = value.get('coordinates') if isinstance(value, dict) else value
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return _convert_text(value)
    # GeoJSON order is longitude, latitude
    longitude, latitude = coordinates[0], coordinates[1]
    return f"{_format_coordinate(latitude)}, {_format_coordinate(longitude)}"


def _convert_text(value: Any) -> Any:
    if isinstance(value, dict) and 'type' in value:
        return json.dumps(value, separators=(',', ':'))
    return value


def convert_value(
    value: Any,
    semantic_type: str,
    row_token: Optional[str] = None,
    resource: Optional[FormResource] = None
) -> Any:
    """
    Convert one raw value for its column

    Args:
        value: Raw value found in the submission
        semantic_type: Semantic type of the column
        row_token: Submission uuid (without "uuid:") used for attachment URLs
        resource: Form the submission belongs to, used for attachment URLs

    Returns:
        Converted value; None stays None
    """
    if value is None:
        return None

    if semantic_type == URL:
        return _convert_url(value, row_token, resource)
    if semantic_type == DATETIME:
        return _convert_datetime(value)
    if semantic_type == DATE:
        return _convert_date(value)
    if semantic_type == GEO:
        return _convert_geopoint(value)
    if semantic_type == TEXT:
        return _convert_text(value)
    return value
