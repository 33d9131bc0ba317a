"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.cloudcall/config.yaml). The request path never reads
these directly: ``load_request_settings()`` snapshots everything it needs
into a ``RequestSettings`` struct once at process start.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".cloudcall"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_TIMEOUT_MS = 120000
DEFAULT_MAX_RETRIES = 4
DEFAULT_MAX_CONCURRENT_REQUESTS = 2

PROXY_KEYS = ("proxy", "HTTP_PROXY", "http_proxy", "HTTPS_PROXY", "https_proxy")
CA_KEYS = ("ca", "HTTPS_CA", "https_ca")
CAFILE_KEYS = ("cafile", "HTTPS_CAFILE", "https_cafile")
TIMEOUT_KEYS = ("AWS_CLIENT_TIMEOUT", "aws_client_timeout")
MAX_RETRIES_KEY = "CLOUDCALL_REQUEST_MAX_RETRIES"
MAX_CONCURRENT_KEY = "CLOUDCALL_MAX_CONCURRENT_REQUESTS"
DEBUG_KEY = "CLOUDCALL_DEBUG"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


@dataclass(frozen=True)
class RequestSettings:
    """Transport and retry settings, fixed for the life of the process."""
    proxy: Optional[str] = None
    ca_certs: Tuple[str, ...] = ()
    ca_files: Tuple[str, ...] = ()
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS
    sdk_debug: bool = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False so real environment variables win
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration
    2. Environment variable (exact name, then upper-cased)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    for env_key in (key, key.upper()):
        if env_key in os.environ:
            return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default


def get_first_config(keys: Tuple[str, ...], default: Any = None) -> Any:
    """Returns the first non-empty value among ``keys``."""
    for key in keys:
        value = get_config(key)
        if value is not None and value != "":
            return value
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def _split_csv(value: Any) -> Tuple[str, ...]:
    if value is None or value == "":
        return ()
    return tuple(part for part in str(value).split(',') if part.strip())


def _non_negative_int(value: Any, default: int) -> int:
    # bool is an int subclass; "true" is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value >= 0 else default


def load_request_settings() -> RequestSettings:
    """Snapshots proxy, CA, timeout and retry configuration.

    Meant to be called once at startup; the result is passed by reference
    into the dispatcher and the client resolver.
    """
    load_configuration()

    proxy = get_first_config(PROXY_KEYS)
    # Inline certificates carry literal "\n" sequences in env vars
    ca_certs = tuple(cert.replace('\\n', '\n') for cert in _split_csv(get_first_config(CA_KEYS)))
    ca_files = tuple(path.strip() for path in _split_csv(get_first_config(CAFILE_KEYS)))

    timeout_ms = get_first_config(TIMEOUT_KEYS)
    if isinstance(timeout_ms, float):
        timeout_ms = int(timeout_ms)
    if not isinstance(timeout_ms, int) or isinstance(timeout_ms, bool) or timeout_ms <= 0:
        if timeout_ms is not None:
            logger.warning(f"Ignoring invalid client timeout {timeout_ms!r}; using {DEFAULT_TIMEOUT_MS}ms")
        timeout_ms = DEFAULT_TIMEOUT_MS

    max_retries = _non_negative_int(get_config(MAX_RETRIES_KEY), DEFAULT_MAX_RETRIES)
    max_concurrent = get_config(MAX_CONCURRENT_KEY)
    if isinstance(max_concurrent, bool) or not isinstance(max_concurrent, int) or max_concurrent < 1:
        max_concurrent = DEFAULT_MAX_CONCURRENT_REQUESTS

    settings = RequestSettings(
        proxy=str(proxy) if proxy else None,
        ca_certs=ca_certs,
        ca_files=ca_files,
        timeout_ms=timeout_ms,
        max_retries=max_retries,
        max_concurrent_requests=max_concurrent,
        sdk_debug=bool(get_config(DEBUG_KEY, False)),
    )
    logger.debug(
        f"Request settings: proxy={'set' if settings.proxy else 'none'}, "
        f"ca_certs={len(ca_certs)}, ca_files={len(ca_files)}, timeout={settings.timeout_ms}ms, "
        f"max_retries={settings.max_retries}, concurrency={settings.max_concurrent_requests}"
    )
    return settings


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
