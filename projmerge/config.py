"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Command-line flags (applied by the CLI)
  2. Environment variables
  3. Project config (<project dir>/.projmerge/config.yaml)
  4. User config (~/.projmerge/config.yaml)
  5. Defaults
"""

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


DEFAULT_SOURCE_EXTENSIONS = [".cs", ".vb"]
DEFAULT_RESOURCE_EXTENSIONS = [".resx"]

TRUE_VALUES = ('true', '1', 'yes')


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def _parse_list(value: Any) -> List[str]:
    """Accept a YAML list or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part) for part in value]


@dataclass
class MergeConfig:
    """Merge behavior."""
    source_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    resource_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_RESOURCE_EXTENSIONS))
    framework_references: List[str] = field(default_factory=list)  # Added to the built-in list
    remove_strong_name: bool = False

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        for name in ("source_extensions", "resource_extensions"):
            for ext in getattr(self, name):
                if not ext.startswith("."):
                    return f"Invalid extension '{ext}' in merge.{name}. Extensions start with '.'"
        overlap = {e.lower() for e in self.source_extensions} & {e.lower() for e in self.resource_extensions}
        if overlap:
            return f"Extensions listed as both source and resource: {', '.join(sorted(overlap))}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"
    quiet: bool = False    # Suppress per-item progress lines

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    merge: MergeConfig = field(default_factory=MergeConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def validate(self) -> Optional[str]:
        return self.merge.validate() or self.display.validate()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        merge_data = data.get("merge") or {}
        display_data = data.get("display") or {}

        source = merge_data.get("source_extensions")
        resource = merge_data.get("resource_extensions")

        return cls(
            merge=MergeConfig(
                source_extensions=_parse_list(source) if source is not None else list(DEFAULT_SOURCE_EXTENSIONS),
                resource_extensions=_parse_list(resource) if resource is not None else list(DEFAULT_RESOURCE_EXTENSIONS),
                framework_references=_parse_list(merge_data.get("framework_references")),
                remove_strong_name=_parse_bool(merge_data.get("remove_strong_name", False))
            ),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto"),
                quiet=_parse_bool(display_data.get("quiet", False))
            )
        )


class ConfigManager:
    """
    Loads layered configuration for one input project.

    Hierarchy:
      1. Environment (PROJMERGE_*)
      2. Project config (.projmerge/config.yaml next to the input project)
      3. User config (~/.projmerge/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".projmerge"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".projmerge"
    PROJECT_CONFIG_FILE = "config.yaml"

    ENV_SYMBOLS = "PROJMERGE_SYMBOLS"
    ENV_QUIET = "PROJMERGE_QUIET"
    ENV_REMOVE_STRONG_NAME = "PROJMERGE_REMOVE_STRONG_NAME"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Start with defaults
        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read(self.project_config_path))

        # Layer 3: Environment overrides
        if os.environ.get(self.ENV_SYMBOLS):
            config_data.setdefault("display", {})["symbols"] = os.environ[self.ENV_SYMBOLS]
        if os.environ.get(self.ENV_QUIET):
            config_data.setdefault("display", {})["quiet"] = os.environ[self.ENV_QUIET]
        if os.environ.get(self.ENV_REMOVE_STRONG_NAME):
            config_data.setdefault("merge", {})["remove_strong_name"] = os.environ[self.ENV_REMOVE_STRONG_NAME]

        self._config = Config.from_dict(config_data)
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        """Read one YAML layer. Missing or malformed files contribute nothing."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            return {}
        return data if isinstance(data, dict) else {}

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

