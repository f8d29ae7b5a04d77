"""Configuration management for apksign."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from apksign.utils.exceptions import ConfigurationError


# Load environment variables from .env file if it exists
load_dotenv()

DEFAULT_ANDROID_HOME = "/opt/android-sdk"


class SigningConfig(BaseModel):
    """Batch signing configuration."""
    root_dir: Optional[str] = Field(default=None, description="Root the apks directory is resolved against (cwd if unset)")
    apks_dir: str = Field(default="apks")
    max_workers: Optional[int] = Field(default=None, ge=1)
    timeout: Optional[float] = Field(default=None, gt=0)


class ToolchainConfig(BaseModel):
    """Android SDK build-tools configuration."""
    android_home: Optional[str] = Field(default=None)
    build_tools_version: Optional[str] = Field(default=None)
    zipalign: bool = Field(default=True)
    command_timeout: Optional[float] = Field(default=None, gt=0, description="Timeout for each zipalign/apksigner run, in seconds")

    def resolve_android_home(self) -> Path:
        """Return the SDK root, falling back to ANDROID_HOME / ANDROID_SDK_ROOT."""
        return Path(
            self.android_home
            or os.getenv("ANDROID_HOME")
            or os.getenv("ANDROID_SDK_ROOT")
            or DEFAULT_ANDROID_HOME
        )


class KeystoreConfig(BaseModel):
    """Keystore configuration. Leave path unset to sign with the debug keystore."""
    path: Optional[str] = Field(default=None)
    alias: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)
    key_password: Optional[str] = Field(default=None)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_enabled: bool = Field(default=False)
    file_path: str = Field(default="./output/apksign.log")


class Config(BaseModel):
    """Main configuration model."""
    signing: SigningConfig = Field(default_factory=SigningConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    keystore: KeystoreConfig = Field(default_factory=KeystoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Configuration manager with support for YAML files and environment variables."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to YAML configuration file.
                        If not provided, loads from config/default.yaml
        """
        if config_path is None:
            local_config = Path(__file__).parent.parent / "config" / "default.yaml"
            if local_config.exists():
                config_path = local_config

        self.config_path = config_path
        self._config: Optional[Config] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        config_dict: Dict[str, Any] = {}

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path) as f:
                    config_dict = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config file {self.config_path}: {e}")

        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")

        config_dict = self._apply_env_overrides(config_dict)

        try:
            self._config = Config(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _apply_env_overrides(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        # Signing overrides
        if "APKSIGN_APKS_DIR" in os.environ:
            config_dict.setdefault("signing", {})["apks_dir"] = os.environ["APKSIGN_APKS_DIR"]

        # Toolchain overrides
        if "ANDROID_HOME" in os.environ:
            config_dict.setdefault("toolchain", {})["android_home"] = os.environ["ANDROID_HOME"]

        # Keystore overrides
        if "APKSIGN_KEYSTORE_PATH" in os.environ:
            config_dict.setdefault("keystore", {})["path"] = os.environ["APKSIGN_KEYSTORE_PATH"]
        if "APKSIGN_KEYSTORE_PASSWORD" in os.environ:
            config_dict.setdefault("keystore", {})["password"] = os.environ["APKSIGN_KEYSTORE_PASSWORD"]
        if "APKSIGN_KEY_ALIAS" in os.environ:
            config_dict.setdefault("keystore", {})["alias"] = os.environ["APKSIGN_KEY_ALIAS"]
        if "APKSIGN_KEY_PASSWORD" in os.environ:
            config_dict.setdefault("keystore", {})["key_password"] = os.environ["APKSIGN_KEY_PASSWORD"]

        # Logging overrides
        if "APKSIGN_LOG_LEVEL" in os.environ:
            config_dict.setdefault("logging", {})["level"] = os.environ["APKSIGN_LOG_LEVEL"]

        return config_dict

    @property
    def config(self) -> Config:
        """Get the configuration object."""
        if self._config is None:
            raise ConfigurationError("Configuration not loaded")
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-separated key path.

        Args:
            key: Dot-separated key path (e.g., "signing.apks_dir")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        try:
            obj = self.config
            for part in key.split("."):
                obj = getattr(obj, part)
            return obj
        except (AttributeError, KeyError):
            return default

    def get_apks_dir(self) -> Path:
        """
        Get the directory scanned for APKs.

        Returns:
            Path: apks_dir resolved against root_dir (or the current directory)
        """
        signing = self.config.signing
        apks_dir = Path(signing.apks_dir).expanduser()
        if apks_dir.is_absolute():
            return apks_dir

        root = Path(signing.root_dir).expanduser() if signing.root_dir else Path.cwd()
        return (root / apks_dir).resolve()
