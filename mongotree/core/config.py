import json
import os
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

# --- Settings Models ---
class MongoSettings(BaseModel):
    host: str = 'localhost'
    port: int = 27017
    database_name: str = "mongotree"
    uri: Optional[str] = None  # overrides host/port when set

    @property
    def connection_url(self) -> str:
        if self.uri:
            return self.uri
        return f"mongodb://{self.host}:{self.port}"

class TreeSettings(BaseModel):
    bucket_name: str = "fs"
    folder_collection_name: str = "folders"
    root_name: Optional[str] = None  # defaults to folder_collection_name
    chunk_size_bytes: int = Field(default=1048576, gt=0)

    @property
    def resolved_root_name(self) -> str:
        return self.root_name or self.folder_collection_name

class GeneralSettings(BaseModel):
    debug_mode: bool = False
    log_dir: Optional[str] = None

class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    tree: TreeSettings = Field(default_factory=TreeSettings)

# --- Manager ---
class ConfigManager:
    """
    Loads, validates and persists the file tree configuration.
    """
    def __init__(self, filepath: str = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic and autosave."""
        if not hasattr(self._data, section):
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        try:
            validated = type(section_obj).model_validate({**section_obj.model_dump(), key: value})
        except ValidationError as e:
            raise ValueError(f"Invalid value for {section}.{key}: {value!r}") from e

        setattr(self._data, section, validated)
        self._save()

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise write defaults."""
        if not os.path.isfile(self.filepath):
            self._save()
            return
        try:
            if self.filepath.endswith('.toml'):
                import tomllib
                with open(self.filepath, "rb") as f:
                    raw = tomllib.load(f)
            else:
                with open(self.filepath, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            self._data = AppConfig.model_validate(raw)
        except (OSError, ValueError) as e:
            # Keep defaults in memory, leave the broken file for the user to fix
            logger.error(f"Failed to load config from {self.filepath}: {e}")

    def _save(self):
        """Persist current config to JSON file."""
        if self.filepath.endswith('.toml'):
            # tomllib is read-only
            return
        dirname = os.path.dirname(self.filepath)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with open(self.filepath, "w", encoding="utf-8") as f:
            json.dump(self._data.model_dump(), f, indent=4)
