"""
Configuration loader for the therapy center backend.
Loads configuration from YAML files and environment variables.
"""

from typing import Dict, Any, List, Optional
from pathlib import Path
import yaml
import os
from pydantic import BaseModel, ConfigDict, Field
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)


class TherapyCenterConfig(BaseModel):
    """Main therapy center configuration."""

    model_config = ConfigDict(extra="allow")

    # Environment
    environment: str = "development"
    debug: bool = True

    # Document store
    store_type: str = "sqlite"  # memory, sqlite, supabase
    sqlite_path: str = "therapy_center.db"
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_documents_table: str = "documents"
    batch_limit: int = Field(default=500, ge=1, le=500)

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    api_prefix: str = "/api"
    allowed_origins: List[str] = Field(default_factory=list)

    # Forms
    form_link_base: str = "/therapy/form/new"

    # Bootstrap super admin (created at startup when the key is set)
    super_admin_key: str = ""
    super_admin_name: str = "Super Admin"

    # Logging
    log_level: str = "INFO"


class ConfigLoader:
    """Load and manage therapy center configuration."""

    def __init__(self, config_dir: str = "config"):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
        """
        self.config_dir = Path(config_dir)
        self.config: Optional[TherapyCenterConfig] = None
        self.load()

    def load(self) -> TherapyCenterConfig:
        """Load configuration from YAML and environment variables."""
        load_dotenv()

        env = os.getenv("THERAPY_ENV", "development")
        config_file = self.config_dir / f"{env}.yaml"

        values = self._load_yaml(self.config_dir / "default.yaml")

        if config_file.exists():
            values.update(self._load_yaml(config_file))
        else:
            logger.warning(f"Config file not found: {config_file}, using defaults")

        values.update(self._load_from_env())

        self.config = TherapyCenterConfig(**values)
        logger.info(
            f"Configuration loaded (environment: {env}, store: {self.config.store_type})"
        )
        return self.config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML config file."""
        if not path.exists():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
                return data or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load YAML config {path}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if env := os.getenv("THERAPY_ENV"):
            config["environment"] = env

        if store_type := os.getenv("STORE_TYPE"):
            config["store_type"] = store_type
        if sqlite_path := os.getenv("SQLITE_DB_PATH"):
            config["sqlite_path"] = sqlite_path
        if supabase_url := os.getenv("SUPABASE_URL"):
            config["supabase_url"] = supabase_url
        if supabase_key := os.getenv("SUPABASE_KEY"):
            config["supabase_key"] = supabase_key
        if table := os.getenv("SUPABASE_DOCUMENTS_TABLE"):
            config["supabase_documents_table"] = table
        if batch_limit := os.getenv("BATCH_LIMIT"):
            config["batch_limit"] = int(batch_limit)

        if port := os.getenv("API_PORT"):
            config["api_port"] = int(port)
        if origins := os.getenv("ALLOWED_ORIGINS"):
            config["allowed_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

        if form_link_base := os.getenv("FORM_LINK_BASE"):
            config["form_link_base"] = form_link_base

        if super_admin_key := os.getenv("SUPER_ADMIN_KEY"):
            config["super_admin_key"] = super_admin_key

        if log_level := os.getenv("LOG_LEVEL"):
            config["log_level"] = log_level

        return config

    def get(self) -> TherapyCenterConfig:
        """Get current configuration."""
        if self.config is None:
            self.load()
        return self.config

    def reload(self) -> TherapyCenterConfig:
        """Reload configuration from files and environment."""
        logger.info("Reloading configuration")
        return self.load()


# Global config loader instance
_config_loader: Optional[ConfigLoader] = None


def get_config() -> TherapyCenterConfig:
    """Get the global configuration instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader.get()


def reset_config() -> None:
    """Drop the cached loader so the next get_config() re-reads files and env."""
    global _config_loader
    _config_loader = None
