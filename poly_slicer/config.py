import copy
import os
from typing import Any, Dict, Optional
import yaml

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "configs", "default_config.yaml")

_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Parameters
    ----------
    path : str | None
        Path to a user configuration file. If ``None``, returns the packaged
        ``configs/default_config.yaml``. Otherwise the user file is merged
        over those defaults, so it only needs the keys it changes.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration dictionary. Callers get their own copy.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = _read_yaml(DEFAULT_CONFIG_PATH)

    if path is None:
        return copy.deepcopy(_CONFIG_CACHE)

    return _merge(_CONFIG_CACHE, _read_yaml(path))
