"""Configuration for jsfile with validation."""

import re
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict
import structlog
import toml

log = structlog.get_logger()


class JSFileConfig(BaseModel):
    """Main configuration for jsfile with validation."""

    model_config = ConfigDict(validate_assignment=True)

    # Files
    encoding: str = "utf-8"
    extensions: list[str] = Field(default_factory=lambda: [".js"])

    # References
    import_function: str = "require"

    # Logging
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    log_file: Optional[Path] = None
    log_json: bool = False

    @field_validator('import_function')
    @classmethod
    def import_function_is_identifier(cls, v):
        if not re.fullmatch(r"[A-Za-z_$][\w$]*", v or ""):
            raise ValueError('import_function must be a JavaScript identifier')
        return v

    @field_validator('extensions')
    @classmethod
    def extensions_have_dot(cls, v):
        if not v:
            raise ValueError('At least one extension is required')
        for ext in v:
            if not ext.startswith('.'):
                raise ValueError(f'Extension must start with ".": {ext}')
        return [ext.lower() for ext in v]

    @classmethod
    def load(cls, path: Optional[str] = None) -> 'JSFileConfig':
        """Load configuration from TOML file.

        Search order if path not provided:
        1. ./jsfile.toml (project-specific)
        2. ~/.jsfile/config.toml (user default)

        Args:
            path: Optional explicit config file path

        Returns:
            JSFileConfig instance
        """
        if path is None:
            candidates = [
                Path("jsfile.toml"),
                Path("~/.jsfile/config.toml").expanduser()
            ]
            for candidate in candidates:
                if candidate.exists():
                    path = str(candidate)
                    log.info("config_found", path=path)
                    break

        if path and Path(path).exists():
            try:
                data = toml.load(path)
                log.info("config_loaded", path=path)
                return cls(**data)
            except Exception as e:
                log.error("config_load_failed", path=path, error=str(e))
                return cls()

        log.info("config_using_defaults")
        return cls()

    def save(self, path: str):
        """Save configuration to TOML file.

        Args:
            path: File path to save to
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            # Convert to dict, handling Path objects
            data = self.model_dump(mode='json', exclude_none=True)
            toml.dump(data, f)
        log.info("config_saved", path=path)
