"""Authentication data models for azprovision.

This module defines the authentication configuration consumed by the
credential factory:
- AuthMethod enum
- Frozen configuration dataclasses (ServicePrincipalConfig,
  ManagedIdentityConfig, AuthConfig)

Security features:
- Frozen dataclasses for immutability
- UUID validation in __post_init__
- No client secret field: secrets come from the environment only
"""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

__all__ = [
    "AuthConfig",
    "AuthMethod",
    "ManagedIdentityConfig",
    "ServicePrincipalConfig",
    "validate_uuid",
]


def validate_uuid(value: str, field_name: str) -> None:
    """Validate UUID format.

    Args:
        value: The string to validate as UUID
        field_name: Name of the field for error messages

    Raises:
        ValueError: If value is not a valid UUID format
    """
    if not value:
        raise ValueError(f"{field_name} must be valid UUID format, got empty string")

    try:
        UUID(value)
    except (ValueError, AttributeError) as e:
        raise ValueError(f"{field_name} must be valid UUID format, got: {value}") from e


class AuthMethod(StrEnum):
    """Authentication method enumeration.

    - AZURE_CLI: Reuse the Azure CLI login (default)
    - SERVICE_PRINCIPAL_SECRET: Service principal with client secret
    - MANAGED_IDENTITY: Managed identity (system or user-assigned)
    - DEFAULT: azure-identity DefaultAzureCredential chain
    """

    AZURE_CLI = "azure_cli"
    SERVICE_PRINCIPAL_SECRET = "sp_secret"  # noqa: S105 - Enum value, not a password
    MANAGED_IDENTITY = "managed_identity"
    DEFAULT = "default"

    @property
    def requires_config(self) -> bool:
        """Check if this method needs method-specific configuration."""
        return self in (AuthMethod.SERVICE_PRINCIPAL_SECRET, AuthMethod.MANAGED_IDENTITY)


@dataclass(frozen=True)
class ServicePrincipalConfig:
    """Service principal authentication configuration.

    Security:
    - No client_secret storage - must come from environment
    - tenant_id and client_id validated as UUIDs
    """

    tenant_id: str
    client_id: str

    def __post_init__(self):
        validate_uuid(self.tenant_id, "tenant_id")
        validate_uuid(self.client_id, "client_id")


@dataclass(frozen=True)
class ManagedIdentityConfig:
    """Managed identity authentication configuration.

    Optional client_id for user-assigned managed identity.
    If None, uses system-assigned managed identity.
    """

    client_id: str | None = None

    def __post_init__(self):
        if self.client_id is not None:
            validate_uuid(self.client_id, "client_id")


@dataclass(frozen=True)
class AuthConfig:
    """Complete authentication configuration.

    Combines authentication method with method-specific configuration and
    validates that the two agree.
    """

    method: AuthMethod
    service_principal: ServicePrincipalConfig | None = None
    managed_identity: ManagedIdentityConfig | None = None

    def __post_init__(self):
        if self.method == AuthMethod.SERVICE_PRINCIPAL_SECRET and not self.service_principal:
            raise ValueError(f"{self.method.value} requires service_principal configuration")

        if self.method == AuthMethod.MANAGED_IDENTITY and not self.managed_identity:
            raise ValueError(f"{self.method.value} requires managed_identity configuration")

        if not self.method.requires_config and (self.service_principal or self.managed_identity):
            raise ValueError(
                f"{self.method.value} method should not have service_principal or "
                "managed_identity configuration"
            )
