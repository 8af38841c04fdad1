"""
Configuration management for the survey connector
"""

import yaml
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

def get_project_root() -> Path:
    """Get the project root directory"""
    return Path(__file__).parent.parent

def _substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text using ${VAR} syntax

    Args:
        text: Text containing ${VAR} or ${VAR:default} patterns

    Returns:
        Text with environment variables substituted
    """
    if not isinstance(text, str):
        return text

    pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

    def replace_match(match):
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ''
        return os.getenv(var_name, default_value)

    return re.sub(pattern, replace_match, text)

def _process_config_values(config: Any) -> Any:
    """Recursively substitute environment variables in config values"""
    if isinstance(config, dict):
        return {key: _process_config_values(value) for key, value in config.items()}
    elif isinstance(config, list):
        return [_process_config_values(item) for item in config]
    elif isinstance(config, str):
        return _substitute_env_vars(config)
    else:
        return config

def _safe_int(value: Any, default: Optional[int]) -> Optional[int]:
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default

def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from config.yml and environment variables

    Args:
        config_path: Optional path to config file

    Returns:
        Configuration dictionary
    """
    load_dotenv()

    if config_path is None:
        config_path = get_project_root() / "config.yml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    config = _process_config_values(config)
    _override_with_env_vars(config)

    return config

def _override_with_env_vars(config: Dict[str, Any]) -> None:
    """Override config values with environment variables"""

    odk = config.setdefault('odk', {})
    odk['username'] = os.getenv('ODK_USERNAME', odk.get('username'))
    odk['password'] = os.getenv('ODK_PASSWORD', odk.get('password'))
    odk['project_id'] = os.getenv('ODK_PROJECT_ID', odk.get('project_id'))
    odk['form_id'] = os.getenv('ODK_FORM_ID', odk.get('form_id'))
    if os.getenv('ODK_BASE_URL'):
        odk['base_url'] = os.getenv('ODK_BASE_URL')

    # Values substituted from ${VAR} arrive as strings
    connector = config.setdefault('connector', {}) or {}
    config['connector'] = connector
    connector['page_size'] = _safe_int(os.getenv('CONNECTOR_PAGE_SIZE', connector.get('page_size')), 1000)
    connector['row_count'] = _safe_int(os.getenv('CONNECTOR_ROW_COUNT', connector.get('row_count')), None)
    connector['skip'] = _safe_int(connector.get('skip'), 0)

    logging_config = config.setdefault('logging', {}) or {}
    config['logging'] = logging_config
    logging_config['level'] = os.getenv('LOG_LEVEL', logging_config.get('level', 'INFO'))

def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration for required fields

    Args:
        config: Configuration dictionary

    Returns:
        True if valid, raises ValueError if invalid
    """
    required_fields = [
        'odk.base_url',
        'odk.username',
        'odk.password',
        'odk.project_id',
        'odk.form_id'
    ]

    for field in required_fields:
        keys = field.split('.')
        value = config

        try:
            for key in keys:
                value = value[key]

            if not value:
                raise ValueError(f"Required configuration field '{field}' is empty")

        except (KeyError, TypeError):
            raise ValueError(f"Required configuration field '{field}' is missing")

    page_size = config.get('connector', {}).get('page_size')
    if page_size is not None and page_size <= 0:
        raise ValueError(f"connector.page_size must be positive, got {page_size}")

    return True
