import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / ".tokenweaver.yaml"

ENV_PREFIX = "TOKENWEAVER_"

# environment variable suffix -> settings field
ENV_FIELDS = {
    "PROJECT_NAME": "project_name",
    "VERSION": "version",
    "FORMATS": "formats",
    "FONT_ROOT": "font_root",
    "LOG_LEVEL": "log_level",
}


@dataclass
class ExportSettings:
    """Effective export settings after all configuration sources are applied."""
    project_name: str = "design-system"
    version: str = "1.0.0"
    formats: List[str] = field(default_factory=lambda: ["all"])
    font_root: Optional[str] = None
    log_level: str = "INFO"

    def update(self, values: Dict[str, Any]) -> None:
        """Apply known, non-empty keys from ``values``."""
        names = {f.name for f in fields(self)}
        for key, value in values.items():
            if key not in names or value is None or value == "" or value == []:
                continue
            if key == "formats":
                value = _split_formats(value)
            setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _split_formats(value: Any) -> List[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(',') if part.strip()]
    return [str(part) for part in value]


class SettingsManager:
    """
    Loads and saves TokenWeaver settings.

    Precedence, lowest first: defaults, the YAML config file, a ``.env`` file,
    ``TOKENWEAVER_*`` environment variables, then explicit overrides passed to
    :meth:`resolve`.
    """

    def __init__(self, config_file: Optional[Path] = None, env_file: Optional[Path] = None,
                 environ: Optional[Dict[str, str]] = None):
        self.config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
        self.env_file = env_file
        self._environ = environ
        self._settings: Dict[str, Any] = {}
        self.load_settings()

    def load_settings(self) -> None:
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    raise ValueError("top level must be a mapping")
                self._settings = loaded
            else:
                self._settings = {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Could not load settings from {self.config_file}: {e}")
            self._settings = {}

    def save_settings(self) -> None:
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self._settings, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            logger.warning(f"Could not save settings to {self.config_file}: {e}")

    @property
    def project_name(self) -> str:
        return self._settings.get("project_name", ExportSettings.project_name)

    @project_name.setter
    def project_name(self, value: str) -> None:
        self._settings["project_name"] = value

    @property
    def version(self) -> str:
        return str(self._settings.get("version", ExportSettings.version))

    @version.setter
    def version(self, value: str) -> None:
        self._settings["version"] = value

    @property
    def formats(self) -> List[str]:
        return _split_formats(self._settings.get("formats", ["all"]))

    @formats.setter
    def formats(self, value: List[str]) -> None:
        self._settings["formats"] = list(value)

    @property
    def font_root(self) -> Optional[str]:
        return self._settings.get("font_root")

    @font_root.setter
    def font_root(self, value: Optional[str]) -> None:
        self._settings["font_root"] = value

    def environment_overrides(self) -> Dict[str, Any]:
        """``TOKENWEAVER_*`` values from the process environment (after loading ``.env``)."""
        if self._environ is None:
            load_dotenv(dotenv_path=self.env_file, override=False)
            environ = os.environ
        else:
            environ = self._environ
        overrides = {}
        for suffix, name in ENV_FIELDS.items():
            value = environ.get(ENV_PREFIX + suffix)
            if value:
                overrides[name] = value
        return overrides

    def resolve(self, **overrides) -> ExportSettings:
        """Merge every configuration source into an :class:`ExportSettings`."""
        settings = ExportSettings()
        settings.update(self._settings)
        settings.update(self.environment_overrides())
        settings.update(overrides)
        settings.log_level = str(settings.log_level).upper()
        return settings
