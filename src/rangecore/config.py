from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from rangecore.exceptions import ConfigError

class AppSettings(BaseSettings):
    name: str = "rangecore"
    version: str = "1.0.0"

class LoggingSettings(BaseSettings):
    log_requests: bool = True
    level: str = "INFO"

class SecuritySettings(BaseSettings):
    """
    Optional request guardrails for the HTTP adapter.
    """
    api_token: Optional[str] = None  # Bearer token or X-API-Key
    max_body_kb: int = 256  # Content-Length guard; drill payloads are small

class StorageSettings(BaseSettings):
    db_path: Path = Path("./data/rangecore.db")

class RoleSettings(BaseSettings):
    """
    Boundary normalization for role values handed over by the identity provider.
    Aliases map provider spellings onto the closed role enums; values matching
    neither a role nor an alias are retried with provider prefixes stripped.
    """
    provider_prefixes: list[str] = ["org:", "team:", "role:", "roles/"]
    org_aliases: dict[str, str] = {
        # Workspace roles used by the hosted backend
        "owner": "unit_commander",
        "admin": "team_commander",
        "instructor": "squad_commander",
        "member": "soldier",
        "unit_cmdr": "unit_commander",
        "team_cmdr": "team_commander",
        "squad_cmdr": "squad_commander",
        "squad_leader": "squad_commander",
    }
    team_aliases: dict[str, str] = {
        "team_owner": "owner",
        "team_commander": "commander",
        "squad_leader": "squad_commander",
        "member": "soldier",
    }

class DrillSettings(BaseSettings):
    # Extra team-curated templates merged into the built-in library
    extra_templates_path: Optional[Path] = None

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__", env_file=".env", extra="ignore")
    app: AppSettings = AppSettings()
    logging: LoggingSettings = LoggingSettings()
    security: SecuritySettings = SecuritySettings()
    storage: StorageSettings = StorageSettings()
    roles: RoleSettings = RoleSettings()
    drills: DrillSettings = DrillSettings()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        # Load from default path if exists
        default_path = Path("config/settings.yaml")
        path = config_path or (default_path if default_path.exists() else None)

        if not path:
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to read settings from {path}: {exc}") from exc

        if not isinstance(config_data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping")
        return cls(**config_data)

settings = Settings.load()
