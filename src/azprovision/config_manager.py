"""Configuration management module.

Persistent provisioner settings stored as TOML at ~/.azprovision/config.toml:
subscription, default location, authentication method and the long-running
operation poll interval / timeout.

Resolution order for every value: environment variable, then config file,
then built-in default.

Security:
- Config file permissions: 0600 (owner read/write only)
- Client secrets are never written to the config file
"""

import logging
import os
import tomllib
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

import tomlkit

from azprovision.auth_models import (
    AuthConfig,
    AuthMethod,
    ManagedIdentityConfig,
    ServicePrincipalConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "eastus"
DEFAULT_OPERATION_TIMEOUT = 1800.0


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


@dataclass
class ProvisionerConfig:
    """Provisioner configuration data."""

    subscription_id: str | None = None
    default_location: str = DEFAULT_LOCATION
    auth_method: str = AuthMethod.AZURE_CLI.value
    tenant_id: str | None = None
    client_id: str | None = None
    managed_identity_client_id: str | None = None
    poll_interval: float | None = None  # None lets the SDK pick
    operation_timeout: float = DEFAULT_OPERATION_TIMEOUT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = asdict(self)
        # TOML has no null
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProvisionerConfig":
        """Create from dictionary.

        Raises:
            ConfigError: If a numeric value is malformed
        """
        return cls(
            subscription_id=data.get("subscription_id"),
            default_location=data.get("default_location", DEFAULT_LOCATION),
            auth_method=data.get("auth_method", AuthMethod.AZURE_CLI.value),
            tenant_id=data.get("tenant_id"),
            client_id=data.get("client_id"),
            managed_identity_client_id=data.get("managed_identity_client_id"),
            poll_interval=_parse_seconds(data.get("poll_interval"), "poll_interval"),
            operation_timeout=_parse_seconds(
                data.get("operation_timeout", DEFAULT_OPERATION_TIMEOUT), "operation_timeout"
            ),
        )

    def with_environment(self) -> "ProvisionerConfig":
        """Return a copy with environment variable overrides applied.

        Environment variables (all optional):
            AZPROVISION_SUBSCRIPTION_ID (falls back to AZURE_SUBSCRIPTION_ID)
            AZPROVISION_LOCATION
            AZPROVISION_AUTH_METHOD
            AZPROVISION_POLL_INTERVAL: seconds
            AZPROVISION_TIMEOUT: seconds
            AZURE_TENANT_ID, AZURE_CLIENT_ID

        Raises:
            ConfigError: If a numeric override is malformed
        """
        overrides: dict[str, Any] = {}

        subscription = os.getenv("AZPROVISION_SUBSCRIPTION_ID") or os.getenv(
            "AZURE_SUBSCRIPTION_ID"
        )
        if subscription:
            overrides["subscription_id"] = subscription
        if location := os.getenv("AZPROVISION_LOCATION"):
            overrides["default_location"] = location
        if auth_method := os.getenv("AZPROVISION_AUTH_METHOD"):
            overrides["auth_method"] = auth_method
        if tenant_id := os.getenv("AZURE_TENANT_ID"):
            overrides["tenant_id"] = tenant_id
        if client_id := os.getenv("AZURE_CLIENT_ID"):
            overrides["client_id"] = client_id
        if poll_interval := os.getenv("AZPROVISION_POLL_INTERVAL"):
            overrides["poll_interval"] = _parse_seconds(poll_interval, "AZPROVISION_POLL_INTERVAL")
        if timeout := os.getenv("AZPROVISION_TIMEOUT"):
            overrides["operation_timeout"] = _parse_seconds(timeout, "AZPROVISION_TIMEOUT")

        return replace(self, **overrides)

    def to_auth_config(self) -> AuthConfig:
        """Build the AuthConfig described by this configuration.

        Raises:
            ConfigError: Unknown auth method or invalid identifiers
        """
        try:
            method = AuthMethod(self.auth_method)
        except ValueError as e:
            valid = ", ".join(m.value for m in AuthMethod)
            raise ConfigError(
                f"Unknown auth_method '{self.auth_method}'. Valid values: {valid}"
            ) from e

        try:
            if method == AuthMethod.SERVICE_PRINCIPAL_SECRET:
                return AuthConfig(
                    method=method,
                    service_principal=ServicePrincipalConfig(
                        tenant_id=self.tenant_id or "", client_id=self.client_id or ""
                    ),
                )
            if method == AuthMethod.MANAGED_IDENTITY:
                return AuthConfig(
                    method=method,
                    managed_identity=ManagedIdentityConfig(
                        client_id=self.managed_identity_client_id
                    ),
                )
            return AuthConfig(method=method)
        except ValueError as e:
            raise ConfigError(f"Invalid authentication configuration: {e}") from e


def _parse_seconds(value: Any, name: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number of seconds, got: {value!r}") from e
    if seconds <= 0:
        raise ConfigError(f"{name} must be positive, got: {value!r}")
    return seconds


class ConfigManager:
    """Manage the azprovision configuration file.

    Configuration is stored at ~/.azprovision/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".azprovision"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Raises:
            ConfigError: If a custom path was given and does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Ensure config directory exists with secure permissions.

        Raises:
            ConfigError: If directory creation fails
        """
        try:
            cls.DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            os.chmod(cls.DEFAULT_CONFIG_DIR, 0o700)
            logger.debug(f"Config directory ready: {cls.DEFAULT_CONFIG_DIR}")
            return cls.DEFAULT_CONFIG_DIR
        except Exception as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> ProvisionerConfig:
        """Load configuration from file.

        Returns defaults when the default config file does not exist.

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ProvisionerConfig()

        try:
            mode = config_path.stat().st_mode & 0o777
            if mode & 0o077:
                logger.warning(
                    f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                )
                os.chmod(config_path, 0o600)

            with open(config_path, "rb") as f:
                data = tomllib.load(f)

            logger.debug(f"Loaded config from: {config_path}")
            return ProvisionerConfig.from_dict(data)

        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Failed to load config: {e}") from e

    @classmethod
    def load_effective_config(cls, custom_path: str | None = None) -> ProvisionerConfig:
        """Load the config file and apply environment overrides."""
        return cls.load_config(custom_path).with_environment()

    @classmethod
    def save_config(cls, config: ProvisionerConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file.

        Existing comments and formatting are preserved; the file is written to
        a temporary path with mode 0600 and renamed into place.

        Returns:
            Path the configuration was written to

        Raises:
            ConfigError: If saving fails
        """
        temp_path: Path | None = None
        try:
            if custom_path:
                config_path = Path(custom_path).expanduser().resolve()
                config_path.parent.mkdir(parents=True, exist_ok=True)
            else:
                cls.ensure_config_dir()
                config_path = cls.DEFAULT_CONFIG_FILE

            temp_path = config_path.with_suffix(".tmp")

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
                # Drop keys whose value was cleared
                for key in list(doc.keys()):
                    if key in ProvisionerConfig.__dataclass_fields__ and key not in config.to_dict():
                        del doc[key]
            else:
                doc = tomlkit.document()

            for key, value in config.to_dict().items():
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")
            return config_path

        except Exception as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e


__all__ = [
    "DEFAULT_LOCATION",
    "DEFAULT_OPERATION_TIMEOUT",
    "ConfigError",
    "ConfigManager",
    "ProvisionerConfig",
]
