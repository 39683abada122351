"""
Unit tests for network interface resolution.

Test Coverage:
- Explicit NIC passthrough with zero remote calls
- Subnet lookup failures
- Public IP ensure integration and call ordering
- NIC create payload, failures and missing ids
"""

from dataclasses import replace
from unittest.mock import Mock

import pytest
from azure.core.exceptions import ResourceNotFoundError
from azure.mgmt.network.models import NetworkInterface
from fakes import NIC_ID, PUBLIC_IP_ID, RG, SUBNET_ID, VM_NIC_ID, make_poller

from azprovision.exceptions import (
    AmbiguousNetworkPlacementError,
    NetworkInterfaceCreateError,
    NetworkInterfaceMissingIDError,
    PublicIPLookupError,
    SubnetMissingIDError,
    SubnetResolutionError,
)
from azprovision.network_interface import (
    NetworkInterfaceDescriptor,
    network_interface_name,
    resolve_network_interface,
)

# ============================================================================
# PAYLOAD TESTS
# ============================================================================


class TestNetworkInterfaceDescriptor:
    """Test the NIC create payload."""

    def test_payload_with_public_ip(self):
        payload = NetworkInterfaceDescriptor(
            name="vm1-nic", location="eastus", subnet_id=SUBNET_ID, public_ip_id=PUBLIC_IP_ID
        ).to_payload()

        assert isinstance(payload, NetworkInterface)
        assert payload.location == "eastus"
        (ip_configuration,) = payload.ip_configurations
        assert ip_configuration.name == "ipconfig1"
        assert ip_configuration.primary is True
        assert ip_configuration.private_ip_allocation_method == "Dynamic"
        assert ip_configuration.subnet.id == SUBNET_ID
        assert ip_configuration.public_ip_address.id == PUBLIC_IP_ID

    def test_payload_without_public_ip(self):
        payload = NetworkInterfaceDescriptor(
            name="vm1-nic", location="eastus", subnet_id=SUBNET_ID
        ).to_payload()

        assert payload.ip_configurations[0].public_ip_address is None

    def test_derived_name(self):
        assert network_interface_name("vm1") == "vm1-nic"


# ============================================================================
# RESOLUTION TESTS
# ============================================================================


class TestResolveNetworkInterface:
    """Test resolve_network_interface()."""

    def test_explicit_nic_passthrough(self, explicit_nic_request):
        """Test an explicit NIC id is returned verbatim with zero remote calls."""
        provider = Mock()

        assert resolve_network_interface(provider, explicit_nic_request) == NIC_ID
        assert provider.mock_calls == []

    def test_explicit_nic_wins_over_vnet(self, vnet_request):
        provider = Mock()
        request = replace(vnet_request, network_interface_id=NIC_ID)

        assert resolve_network_interface(provider, request) == NIC_ID
        assert provider.mock_calls == []

    def test_creates_nic_in_subnet(self, provider, mock_network_client, vnet_request):
        request = replace(vnet_request, public_ip_name="")

        result = resolve_network_interface(provider, request)

        assert result == VM_NIC_ID
        mock_network_client.subnets.get.assert_called_once_with(RG, "vnet1", "sub1")
        create = mock_network_client.network_interfaces.begin_create_or_update
        create.assert_called_once()
        rg, name, payload = create.call_args.args
        assert (rg, name) == (RG, "vm1-nic")
        assert payload.ip_configurations[0].subnet.id == SUBNET_ID
        assert payload.ip_configurations[0].public_ip_address is None
        mock_network_client.public_ip_addresses.get.assert_not_called()

    def test_vnet_and_subnet_ids_are_normalized(self, provider, mock_network_client, vnet_request):
        request = replace(
            vnet_request,
            virtual_network_name="/subscriptions/s/resourceGroups/rg1/providers/Microsoft.Network/virtualNetworks/vnet1",
            subnet_name="%2Fsubscriptions%2Fs%2Fsubnets%2Fsub1",
            public_ip_name="",
        )

        resolve_network_interface(provider, request)

        mock_network_client.subnets.get.assert_called_once_with(RG, "vnet1", "sub1")

    def test_public_ip_created_before_nic(self, provider, mock_network_client, vnet_request):
        """Test the public IP is ensured first and attached to the NIC."""
        calls = []
        mock_network_client.public_ip_addresses.get.side_effect = ResourceNotFoundError("missing")
        mock_network_client.public_ip_addresses.begin_create_or_update.side_effect = (
            lambda *a, **kw: calls.append("public_ip") or make_poller(Mock(id=PUBLIC_IP_ID))
        )
        mock_network_client.network_interfaces.begin_create_or_update.side_effect = (
            lambda *a, **kw: calls.append("nic") or make_poller(Mock(id=VM_NIC_ID))
        )

        result = resolve_network_interface(provider, vnet_request)

        assert result == VM_NIC_ID
        assert calls == ["public_ip", "nic"]
        payload = mock_network_client.network_interfaces.begin_create_or_update.call_args.args[2]
        assert payload.ip_configurations[0].public_ip_address.id == PUBLIC_IP_ID

    def test_public_ip_error_propagates_unchanged(self, provider, mock_network_client, vnet_request):
        mock_network_client.public_ip_addresses.get.side_effect = RuntimeError("throttled")

        with pytest.raises(PublicIPLookupError):
            resolve_network_interface(provider, vnet_request)

        mock_network_client.network_interfaces.begin_create_or_update.assert_not_called()

    def test_missing_vnet_after_normalization(self, provider, vnet_request):
        request = replace(vnet_request, virtual_network_name="/")

        with pytest.raises(AmbiguousNetworkPlacementError):
            resolve_network_interface(provider, request)

    def test_subnet_lookup_failure(self, provider, mock_network_client, vnet_request):
        mock_network_client.subnets.get.side_effect = RuntimeError("forbidden")

        with pytest.raises(SubnetResolutionError) as exc_info:
            resolve_network_interface(provider, vnet_request)

        assert "sub1" in str(exc_info.value)
        assert "vnet1" in str(exc_info.value)
        mock_network_client.network_interfaces.begin_create_or_update.assert_not_called()

    def test_subnet_without_id(self, provider, mock_network_client, vnet_request):
        mock_network_client.subnets.get.return_value = Mock(id=None)

        with pytest.raises(SubnetMissingIDError):
            resolve_network_interface(provider, vnet_request)

    def test_nic_submit_failure(self, provider, mock_network_client, vnet_request):
        mock_network_client.network_interfaces.begin_create_or_update.side_effect = RuntimeError(
            "InvalidRequest"
        )

        with pytest.raises(NetworkInterfaceCreateError, match="vm1-nic"):
            resolve_network_interface(provider, vnet_request)

    def test_nic_wait_failure(self, provider, mock_network_client, vnet_request):
        mock_network_client.network_interfaces.begin_create_or_update.return_value = make_poller(
            error=RuntimeError("InternalServerError")
        )

        with pytest.raises(NetworkInterfaceCreateError) as exc_info:
            resolve_network_interface(provider, vnet_request)

        assert exc_info.value.resource_name == "vm1-nic"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_nic_without_id(self, provider, mock_network_client, vnet_request):
        mock_network_client.network_interfaces.begin_create_or_update.return_value = make_poller(
            Mock(id="")
        )

        with pytest.raises(NetworkInterfaceMissingIDError):
            resolve_network_interface(provider, vnet_request)

    def test_new_nic_on_every_call(self, provider, mock_network_client, vnet_request):
        """Test no existing NIC is looked up; each call creates one."""
        resolve_network_interface(provider, vnet_request)
        resolve_network_interface(provider, vnet_request)

        assert mock_network_client.network_interfaces.begin_create_or_update.call_count == 2
        mock_network_client.network_interfaces.get.assert_not_called()
