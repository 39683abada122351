"""
Shared test fixtures for azprovision tests.

This module provides common fixtures used across the unit tests:
- An AzureProvider wired to mock compute/network clients
- Sample creation requests

Model factories and resource ids live in fakes.py.
"""

from unittest.mock import Mock

import pytest
from fakes import (
    NIC_ID,
    PUBLIC_IP_ID,
    RG,
    SUBNET_ID,
    SUBSCRIPTION_ID,
    VM_NIC_ID,
    make_poller,
    nic_model,
    vm_model,
)

from azprovision.azure_provider import AzureProvider
from azprovision.vm_request import CreationRequest

# ============================================================================
# AZURE MOCKING FIXTURES
# ============================================================================


@pytest.fixture
def mock_network_client():
    """Mock NetworkManagementClient.

    Defaults: subnet lookup succeeds, public IP lookup finds pip1, NIC
    create succeeds, NIC lookup returns a private address only.
    """
    client = Mock()
    client.subnets.get.return_value = Mock(id=SUBNET_ID)
    client.public_ip_addresses.get.return_value = Mock(id=PUBLIC_IP_ID, ip_address="20.1.2.3")
    client.public_ip_addresses.begin_create_or_update.return_value = make_poller(
        Mock(id=PUBLIC_IP_ID, ip_address="20.1.2.3")
    )
    client.network_interfaces.begin_create_or_update.return_value = make_poller(Mock(id=VM_NIC_ID))
    client.network_interfaces.get.return_value = nic_model("10.0.0.4")
    return client


@pytest.fixture
def mock_compute_client():
    """Mock ComputeManagementClient whose VM create succeeds."""
    client = Mock()
    client.virtual_machines.begin_create_or_update.return_value = make_poller(vm_model())
    return client


@pytest.fixture
def provider(mock_compute_client, mock_network_client):
    """AzureProvider with injected mock clients; the credential is never used."""
    return AzureProvider(
        Mock(),
        SUBSCRIPTION_ID,
        compute_client=mock_compute_client,
        network_client=mock_network_client,
    )


# ============================================================================
# REQUEST FIXTURES
# ============================================================================


@pytest.fixture
def explicit_nic_request():
    """Request that attaches an existing NIC."""
    return CreationRequest(
        resource_group=RG,
        name="vm1",
        location="eastus",
        size="Standard_B1s",
        admin_username="azureuser",
        admin_password="S3cure!Passw0rd",  # noqa: S106 - test fixture, not a real credential
        network_interface_id=NIC_ID,
    )


@pytest.fixture
def vnet_request():
    """Request that creates a NIC in vnet1/sub1 with public IP pip1."""
    return CreationRequest(
        resource_group=RG,
        name="vm1",
        location="eastus",
        size="Standard_B1s",
        admin_username="azureuser",
        admin_password="S3cure!Passw0rd",  # noqa: S106 - test fixture, not a real credential
        virtual_network_name="vnet1",
        subnet_name="sub1",
        public_ip_name="pip1",
    )
