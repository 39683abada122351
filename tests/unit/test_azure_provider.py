"""Unit tests for azure_provider module."""

from unittest.mock import Mock, patch

import pytest
from fakes import SUBSCRIPTION_ID

from azprovision.azure_provider import AzureProvider
from azprovision.config_manager import ConfigError, ProvisionerConfig


class TestAzureProvider:
    """Test AzureProvider client access."""

    @patch("azprovision.azure_provider.NetworkManagementClient")
    @patch("azprovision.azure_provider.ComputeManagementClient")
    def test_clients_created_lazily_once(self, mock_compute, mock_network):
        credential = Mock()
        provider = AzureProvider(credential, SUBSCRIPTION_ID)

        mock_compute.assert_not_called()
        assert provider.virtual_machines is mock_compute.return_value.virtual_machines
        assert provider.compute_client is provider.compute_client
        mock_compute.assert_called_once_with(credential, SUBSCRIPTION_ID)

        assert provider.subnets is mock_network.return_value.subnets
        assert provider.public_ip_addresses is mock_network.return_value.public_ip_addresses
        assert provider.network_interfaces is mock_network.return_value.network_interfaces
        mock_network.assert_called_once_with(credential, SUBSCRIPTION_ID)

    @patch("azprovision.azure_provider.ComputeManagementClient")
    def test_injected_clients_are_used(self, mock_compute):
        compute = Mock()
        provider = AzureProvider(Mock(), SUBSCRIPTION_ID, compute_client=compute)

        assert provider.compute_client is compute
        mock_compute.assert_not_called()

    def test_lro_options(self):
        assert AzureProvider(Mock(), SUBSCRIPTION_ID).lro_options() == {}
        assert AzureProvider(Mock(), SUBSCRIPTION_ID, polling_interval=5).lro_options() == {
            "polling_interval": 5
        }


class TestFromConfig:
    """Test AzureProvider.from_config()."""

    def test_requires_subscription(self):
        with pytest.raises(ConfigError, match="No subscription configured"):
            AzureProvider.from_config(ProvisionerConfig())

    @patch("azprovision.azure_provider.CredentialFactory.create_credential")
    def test_builds_credential_and_forwards_poll_interval(self, mock_create):
        config = ProvisionerConfig(subscription_id=SUBSCRIPTION_ID, poll_interval=4.0)

        provider = AzureProvider.from_config(config)

        assert provider.credential is mock_create.return_value
        assert provider.subscription_id == SUBSCRIPTION_ID
        assert provider.polling_interval == 4.0
        assert mock_create.call_args.args[0].method == "azure_cli"
