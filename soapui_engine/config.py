"""
Settings loading and persistence for the SOAP-UI engine.

The settings are the four values the host's settings panel exposes, plus an
optional override for where run artifacts are written:

    location: /opt/SoapUI-5.1.1/bin    # SOAP-UI bin directory
    pro_license: false                 # write the XML 'Data Export' report
    load_test: false                   # use loadtestrunner instead of testrunner
    trace_logging: false               # log every step of a run
    output_folder: null                # defaults to the user cache directory

An EngineSettings instance is passed explicitly into the engine for each run;
nothing here is global.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from soapui_engine.exceptions import ConfigurationError

CONFIG_FILENAME = "soapui-engine.yaml"


class EngineSettings(BaseModel):
    """Persisted engine settings."""
    location: str = Field(default="", description="SOAP-UI bin directory containing testrunner")
    pro_license: bool = Field(default=False, description="SOAP-UI Pro: parse the XML Data Export report")
    load_test: bool = Field(default=False, description="Run loadtestrunner instead of testrunner")
    trace_logging: bool = Field(default=False, description="Log each step of a run")
    output_folder: Optional[str] = Field(default=None, description="Override for the run artifact folder")

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v: Any) -> str:
        """Accept Path objects and strip surrounding whitespace."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("output_folder", mode="before")
    @classmethod
    def validate_output_folder(cls, v: Any) -> Optional[str]:
        if v is None or str(v).strip() == "":
            return None
        return str(v).strip()

    @property
    def location_path(self) -> Path:
        return Path(self.location)


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find soapui-engine.yaml in current or parent directories.

    Args:
        start_path: Starting directory (defaults to current working directory)

    Returns:
        Path to config file, or None if not found
    """
    current = start_path or Path.cwd()

    # Search up to 5 levels
    for _ in range(5):
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(config_path: Path) -> EngineSettings:
    """
    Load and validate settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, empty, or invalid
    """
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not raw_config:
        raise ConfigurationError(f"Empty or invalid config file: {config_path}")
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

    try:
        return EngineSettings(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {config_path}: {e}") from e


def save_config(settings: EngineSettings, config_path: Path) -> Path:
    """Write settings to a YAML file, returning the path written."""
    data: Dict[str, Any] = settings.model_dump()
    if data.get("output_folder") is None:
        data.pop("output_folder", None)

    with open(config_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    return config_path


def resolve_settings(config: Optional[str] = None) -> EngineSettings:
    """Load settings from an explicit path, a discovered file, or defaults."""
    config_path = Path(config) if config else find_config_file()
    if config_path is None:
        return EngineSettings()
    return load_config(config_path)
