"""Azure management client access.

Philosophy:
- One object owns the credential, subscription and the two management clients
- Clients are created lazily and may be injected (tests, embedding frameworks)
- The SDK poller owns polling; this module only forwards polling_interval

Public API:
    AzureProvider: Credential + subscription + compute/network clients
"""

import logging
from typing import Any

from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient

from azprovision.config_manager import ConfigError, ProvisionerConfig
from azprovision.credential_factory import CredentialFactory

logger = logging.getLogger(__name__)

__all__ = ["AzureProvider"]


class AzureProvider:
    """Access point for the compute and network management APIs.

    Example:
        >>> provider = AzureProvider(credential, "00000000-0000-0000-0000-000000000000")
        >>> provider.subnets.get("rg", "vnet", "default")  # doctest: +SKIP
    """

    def __init__(
        self,
        credential: Any,
        subscription_id: str,
        *,
        compute_client: Any = None,
        network_client: Any = None,
        polling_interval: float | None = None,
    ):
        self.credential = credential
        self.subscription_id = subscription_id
        self.polling_interval = polling_interval
        self._compute_client = compute_client
        self._network_client = network_client

    @classmethod
    def from_config(cls, config: ProvisionerConfig) -> "AzureProvider":
        """Build a provider from configuration.

        Raises:
            ConfigError: No subscription configured or invalid auth settings
            CredentialFactoryError: Credential could not be created
        """
        if not config.subscription_id:
            raise ConfigError(
                "No subscription configured. Set AZPROVISION_SUBSCRIPTION_ID "
                "or subscription_id in the config file."
            )
        credential = CredentialFactory.create_credential(config.to_auth_config())
        return cls(
            credential,
            config.subscription_id,
            polling_interval=config.poll_interval,
        )

    @property
    def compute_client(self) -> Any:
        if self._compute_client is None:
            logger.debug(f"Creating compute client for subscription {self.subscription_id}")
            self._compute_client = ComputeManagementClient(self.credential, self.subscription_id)
        return self._compute_client

    @property
    def network_client(self) -> Any:
        if self._network_client is None:
            logger.debug(f"Creating network client for subscription {self.subscription_id}")
            self._network_client = NetworkManagementClient(self.credential, self.subscription_id)
        return self._network_client

    @property
    def virtual_machines(self) -> Any:
        return self.compute_client.virtual_machines

    @property
    def network_interfaces(self) -> Any:
        return self.network_client.network_interfaces

    @property
    def public_ip_addresses(self) -> Any:
        return self.network_client.public_ip_addresses

    @property
    def subnets(self) -> Any:
        return self.network_client.subnets

    def lro_options(self) -> dict[str, Any]:
        """Keyword arguments for begin_* calls."""
        if self.polling_interval is None:
            return {}
        return {"polling_interval": self.polling_interval}
