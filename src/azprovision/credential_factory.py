"""Credential factory for Azure authentication.

Creates Azure Identity SDK credential objects from an AuthConfig. Token
acquisition and refresh stay inside azure-identity.

Supported credential types:
- AzureCliCredential: Delegate to Azure CLI (default)
- ClientSecretCredential: Service principal with client secret
- ManagedIdentityCredential: Managed identity (system or user-assigned)
- DefaultAzureCredential: The SDK's environment/identity/CLI chain

Security:
- No token storage - delegates to Azure Identity SDK
- Client secrets from environment variables only
- Log sanitization for all error messages
"""

import logging
import os
from typing import Any

from azure.identity import (
    AzureCliCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    ManagedIdentityCredential,
)

from azprovision.auth_models import AuthConfig, AuthMethod, ManagedIdentityConfig, ServicePrincipalConfig
from azprovision.log_sanitizer import LogSanitizer

logger = logging.getLogger(__name__)

CLIENT_SECRET_ENV_VARS = ("AZURE_CLIENT_SECRET", "AZPROVISION_SP_CLIENT_SECRET")


class CredentialFactoryError(Exception):
    """Raised when credential creation fails."""

    pass


class CredentialFactory:
    """Factory for creating Azure Identity credentials.

    Philosophy:
    - Delegate to Azure SDK, don't reinvent
    - Fail-fast: catch configuration errors before the first remote call
    """

    @staticmethod
    def create_credential(auth_config: AuthConfig) -> Any:
        """Create Azure Identity credential from configuration.

        Args:
            auth_config: Authentication configuration

        Returns:
            Azure Identity credential object (TokenCredential)

        Raises:
            CredentialFactoryError: If credential creation fails
        """
        logger.debug(f"Creating credential for auth method {auth_config.method.value}")
        try:
            if auth_config.method == AuthMethod.AZURE_CLI:
                return AzureCliCredential()

            if auth_config.method == AuthMethod.SERVICE_PRINCIPAL_SECRET:
                if not auth_config.service_principal:
                    raise CredentialFactoryError(
                        "SERVICE_PRINCIPAL_SECRET requires service_principal configuration"
                    )
                return CredentialFactory._create_sp_secret_credential(
                    auth_config.service_principal
                )

            if auth_config.method == AuthMethod.MANAGED_IDENTITY:
                return CredentialFactory._create_managed_identity_credential(
                    auth_config.managed_identity
                )

            if auth_config.method == AuthMethod.DEFAULT:
                return DefaultAzureCredential()

            raise CredentialFactoryError(
                f"Unsupported authentication method: {auth_config.method}"
            )

        except CredentialFactoryError:
            raise
        except Exception as e:
            safe_error = LogSanitizer.create_safe_error_message(e, "Credential creation failed")
            raise CredentialFactoryError(safe_error) from e

    @staticmethod
    def _create_sp_secret_credential(config: ServicePrincipalConfig) -> ClientSecretCredential:
        """Create service principal credential with client secret.

        The client secret MUST come from AZURE_CLIENT_SECRET or
        AZPROVISION_SP_CLIENT_SECRET.

        Raises:
            CredentialFactoryError: If client secret not found in environment
        """
        client_secret = None
        for var in CLIENT_SECRET_ENV_VARS:
            client_secret = os.getenv(var)
            if client_secret:
                break

        if not client_secret:
            raise CredentialFactoryError(
                "Client secret not found in environment. "
                "Set AZURE_CLIENT_SECRET or AZPROVISION_SP_CLIENT_SECRET environment variable."
            )

        return ClientSecretCredential(
            tenant_id=config.tenant_id,
            client_id=config.client_id,
            client_secret=client_secret,
        )

    @staticmethod
    def _create_managed_identity_credential(
        config: ManagedIdentityConfig | None = None,
    ) -> ManagedIdentityCredential:
        """Create managed identity credential.

        System-assigned without a client_id, user-assigned with one.
        """
        if config and config.client_id:
            return ManagedIdentityCredential(client_id=config.client_id)
        return ManagedIdentityCredential()


__all__ = ["CLIENT_SECRET_ENV_VARS", "CredentialFactory", "CredentialFactoryError"]
