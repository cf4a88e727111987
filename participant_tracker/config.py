from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from participant_tracker.store import STORAGE_KEY

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_storage_path() -> Path:
    return Path.home() / ".participant-tracker" / "storage.json"


class Config(BaseModel):
    """Configuration data for a participant tracker session."""

    storage_path: Path = Field(
        default_factory=default_storage_path,
        description="JSON file holding the local key/value storage.",
    )
    storage_key: str = Field(
        STORAGE_KEY, description="Storage key under which records are kept."
    )
    export_filename: str = Field(
        "participants.csv", description="Default file name for CSV exports."
    )
    log_level: str = Field("WARNING", description="Console logging level.")

    def validate_paths(self) -> None:
        """Ensure the storage path is usable as a file."""
        if self.storage_path.exists() and not self.storage_path.is_file():
            raise ValueError(f"storage_path is not a file: {self.storage_path}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")


def resolve_config_paths(config_data: dict, config_path: Path) -> dict:
    """Resolve a relative storage path against the configuration file directory.

    Args:
        config_data: Raw configuration dictionary.
        config_path: Path to the configuration file.

    Returns:
        dict: Configuration data with resolved paths.
    """
    if not config_data or not config_path:
        return config_data or {}

    resolved_data = dict(config_data)
    value = resolved_data.get("storage_path")
    if value:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = (config_path.parent / path).resolve()
        resolved_data["storage_path"] = str(path)
    return resolved_data


def load_config_file(config_path: Path) -> Config:
    """Load and validate a YAML configuration file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value has the wrong type.
        ValueError: If a path or level is unusable.
    """
    config_path = Path(config_path)
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping of settings")
    config = Config(**resolve_config_paths(data, config_path))
    config.validate_paths()
    return config
