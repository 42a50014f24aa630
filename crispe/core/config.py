"""Settings lookup for the optimizer, the providers and the relay.

Every setting is resolved in the same order: an explicit argument, then
config.json in the working directory, then an environment variable named
after the key path (``["siliconflow", "api_key"]`` -> ``SILICONFLOW_API_KEY``),
then the default. config.json is parsed once per modification time.
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

CONFIG_FILE = "config.json"

KeyPath = Sequence[str]


@lru_cache(maxsize=8)
def _parse_config(path: str, mtime_ns: int) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(config_path: str = CONFIG_FILE) -> Dict[str, Any]:
    """Return the parsed config file, or {} when it is missing or invalid.

    The result is cached until the file changes; treat it as read-only.
    """
    path = Path(config_path).resolve()
    try:
        mtime_ns = path.stat().st_mtime_ns
    except OSError:
        return {}
    return _parse_config(str(path), mtime_ns)


def env_name(keys: KeyPath) -> str:
    """Environment variable consulted for a key path."""
    return "_".join(key.upper() for key in keys)


def _lookup(config: Dict[str, Any], keys: KeyPath) -> Any:
    node: Any = config
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def resolve_setting(
    explicit: Any,
    *key_paths: KeyPath,
    default: Any = None,
    config: Optional[Dict[str, Any]] = None,
) -> Any:
    """Resolve one setting that may live under several key paths.

    Key paths are tried in order within each source, so
    ``resolve_setting(None, ["openai", "api_key"], ["siliconflow", "api_key"])``
    prefers either entry in config.json over either environment variable.

    Args:
        explicit: Value passed by the caller; wins when not None or empty
        *key_paths: Nested config keys, most specific first
        default: Returned when no source provides a value
        config: Config mapping to use instead of config.json

    Returns:
        The first value found, or default
    """
    if explicit not in (None, ""):
        return explicit

    if config is None:
        config = load_config()

    for keys in key_paths:
        value = _lookup(config, keys)
        if value is not None:
            return value

    for keys in key_paths:
        value = os.environ.get(env_name(keys))
        if value:
            return value

    return default


def get_config_value(
    keys: List[str], default: Any = None, config: Optional[Dict[str, Any]] = None
) -> Any:
    """Look up a single key path in config.json, then the environment."""
    return resolve_setting(None, keys, default=default, config=config)
