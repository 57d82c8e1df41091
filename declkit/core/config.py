# core/config.py
"""
declkit Configuration Management

Handles loading and validation of declkit.config.json: output naming, preamble
location, and the override tables consulted during rendering.
"""

import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List

from declkit.core.overrides import OverrideTable
from declkit.core.constants import DeclarationSyntax, ConfigFiles


__version__ = "0.3.0"

logger = logging.getLogger(__name__)


def get_version() -> str:
    return __version__


@dataclass
class OverridesConfig:
    """Per-Path-Id override tables."""
    hidden: List[str] = field(default_factory=list)
    typeOverrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    objectTemplates: Dict[str, str] = field(default_factory=dict)
    anyReplacements: Dict[str, str] = field(default_factory=dict)


@dataclass
class DeclkitConfig:
    """Complete declkit configuration."""
    rootNamespace: str = DeclarationSyntax.DEFAULT_ROOT_NAMESPACE
    preamble: Optional[str] = None
    timestamp: bool = True
    docsBaseUrl: str = "https://developer.chrome.com"
    overrides: OverridesConfig = field(default_factory=OverridesConfig)

    def build_overrides(self) -> OverrideTable:
        """Create the override collaborator for a generation run."""
        return OverrideTable(
            hidden=set(self.overrides.hidden),
            typeOverrides=dict(self.overrides.typeOverrides),
            objectTemplates=dict(self.overrides.objectTemplates),
            anyReplacements=dict(self.overrides.anyReplacements),
        )


def load_declkit_config(
    config_path: Optional[str] = None,
    project_root: Optional[str] = None,
) -> DeclkitConfig:
    """
    Load declkit configuration from a file, or fall back to defaults.

    Args:
        config_path: Explicit config file; must exist when given
        project_root: Directory searched for declkit.config.json (defaults to cwd)

    Returns:
        DeclkitConfig with loaded or default configuration

    Raises:
        ValueError: if the file is missing (explicit path), not JSON, or invalid
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ValueError(f"Config file not found: {path}")
        return _load_config_from_file(path)

    if project_root is None:
        project_root = str(Path.cwd())

    path = Path(project_root) / ConfigFiles.CONFIG_FILE
    if path.exists():
        return _load_config_from_file(path)

    logger.debug(f"No {ConfigFiles.CONFIG_FILE} in {project_root}, using defaults")
    return DeclkitConfig()


def _load_config_from_file(config_path: Path) -> DeclkitConfig:
    """Load configuration from existing file."""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {config_path}: {e}")
    except OSError as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}")

    try:
        config = _validate_and_convert_config(config_data)
    except ValueError as e:
        raise ValueError(f"Invalid config in {config_path}: {e}")

    logger.info(f"Loaded declkit config from {config_path}")
    return config


def _validate_and_convert_config(config_data: Dict[str, Any]) -> DeclkitConfig:
    """Validate and convert raw config data to DeclkitConfig object."""
    if not isinstance(config_data, dict):
        raise ValueError("config root must be an object")

    root_namespace = config_data.get("rootNamespace", DeclarationSyntax.DEFAULT_ROOT_NAMESPACE)
    if not isinstance(root_namespace, str) or not root_namespace:
        raise ValueError(f"Invalid rootNamespace: {root_namespace!r}")

    preamble = config_data.get("preamble")
    if preamble is not None and not isinstance(preamble, str):
        raise ValueError(f"Invalid preamble path: {preamble!r}")

    timestamp = config_data.get("timestamp", True)
    if not isinstance(timestamp, bool):
        raise ValueError(f"Invalid timestamp flag: {timestamp!r}")

    docs_base_url = config_data.get("docsBaseUrl", "https://developer.chrome.com")
    if not isinstance(docs_base_url, str):
        raise ValueError(f"Invalid docsBaseUrl: {docs_base_url!r}")

    # Extract and validate override tables
    overrides_data = config_data.get("overrides", {})
    if not isinstance(overrides_data, dict):
        raise ValueError("overrides must be an object")

    hidden = overrides_data.get("hidden", [])
    if not isinstance(hidden, list):
        raise ValueError("overrides.hidden must be a list of Path Ids")

    tables = {}
    for key in ("typeOverrides", "objectTemplates", "anyReplacements"):
        table = overrides_data.get(key, {})
        if not isinstance(table, dict):
            raise ValueError(f"overrides.{key} must be an object keyed by Path Id")
        tables[key] = table

    return DeclkitConfig(
        rootNamespace=root_namespace,
        preamble=preamble,
        timestamp=timestamp,
        docsBaseUrl=docs_base_url,
        overrides=OverridesConfig(hidden=hidden, **tables),
    )
