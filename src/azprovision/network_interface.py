"""Network interface resolution for new VMs.

An explicit network interface id on the request is returned as-is with no
remote call. Otherwise the named subnet is looked up, the optional public IP
is ensured, and a new NIC named "<vm-name>-nic" is created and waited on.

A new NIC is created on every call in the second mode; existing NICs with
the derived name are not searched for, and nothing created here is rolled
back when a later step fails.

Public API:
    NetworkInterfaceDescriptor: NIC creation payload
    network_interface_name: Derived NIC name for a VM
    resolve_network_interface: Return the NIC id the VM should attach
"""

import logging
from dataclasses import dataclass
from typing import Any

from azure.mgmt.network.models import (
    NetworkInterface,
    NetworkInterfaceIPConfiguration,
    PublicIPAddress,
    Subnet,
)

from azprovision.exceptions import (
    AmbiguousNetworkPlacementError,
    NetworkInterfaceCreateError,
    NetworkInterfaceMissingIDError,
    ProvisioningError,
    SubnetMissingIDError,
    SubnetResolutionError,
)
from azprovision.log_sanitizer import LogSanitizer
from azprovision.long_running import OperationContext, wait_for_completion
from azprovision.public_ip import ensure_public_ip
from azprovision.resource_id import resource_name
from azprovision.vm_request import CreationRequest

logger = logging.getLogger(__name__)

__all__ = ["NetworkInterfaceDescriptor", "network_interface_name", "resolve_network_interface"]

IP_CONFIGURATION_NAME = "ipconfig1"


@dataclass(frozen=True)
class NetworkInterfaceDescriptor:
    """Single-IP-configuration NIC with a dynamic private address."""

    name: str
    location: str
    subnet_id: str
    public_ip_id: str | None = None
    primary: bool = True

    def to_payload(self) -> NetworkInterface:
        attachments: dict[str, Any] = {}
        if self.public_ip_id:
            attachments["public_ip_address"] = PublicIPAddress(id=self.public_ip_id)
        ip_configuration = NetworkInterfaceIPConfiguration(
            name=IP_CONFIGURATION_NAME,
            primary=self.primary,
            private_ip_allocation_method="Dynamic",
            subnet=Subnet(id=self.subnet_id),
            **attachments,
        )
        return NetworkInterface(location=self.location, ip_configurations=[ip_configuration])


def network_interface_name(vm_name: str) -> str:
    return f"{vm_name}-nic"


def _resolve_subnet_id(provider: Any, resource_group: str, vnet_name: str, subnet_name: str) -> str:
    try:
        subnet = provider.subnets.get(resource_group, vnet_name, subnet_name)
    except Exception as e:
        raise SubnetResolutionError(
            LogSanitizer.create_safe_error_message(
                e, f"failed to resolve subnet {subnet_name} in virtual network {vnet_name}"
            ),
            resource_name=subnet_name,
        ) from e

    subnet_id = getattr(subnet, "id", None)
    if not subnet_id:
        raise SubnetMissingIDError(
            f"resolved subnet {subnet_name} in virtual network {vnet_name} has no resource ID",
            resource_name=subnet_name,
        )
    return subnet_id


def resolve_network_interface(
    provider: Any,
    request: CreationRequest,
    context: OperationContext | None = None,
) -> str:
    """Return the id of the network interface the VM should use.

    Args:
        provider: AzureProvider (or compatible)
        request: Validated creation request
        context: Optional cancellation/deadline for the create waits

    Returns:
        Network interface resource id

    Raises:
        AmbiguousNetworkPlacementError: Neither placement mode is usable
        SubnetResolutionError: Subnet lookup failed
        SubnetMissingIDError: Subnet returned without an id
        PublicIPLookupError, PublicIPCreateError: From the public IP step
        NetworkInterfaceCreateError: NIC create or wait failed
        NetworkInterfaceMissingIDError: NIC created without an id
        OperationCancelledError: Caller cancelled a wait
    """
    if request.has_explicit_network_interface:
        logger.debug(f"Using explicit network interface {request.network_interface_id}")
        return request.network_interface_id

    vnet_name = resource_name(request.virtual_network_name)
    subnet_name = resource_name(request.subnet_name)
    if not vnet_name or not subnet_name:
        raise AmbiguousNetworkPlacementError(
            "either networkInterfaceId or (virtualNetworkName and subnetName) must be provided"
        )

    subnet_id = _resolve_subnet_id(provider, request.resource_group, vnet_name, subnet_name)

    public_ip_id = None
    if request.public_ip_name.strip():
        public_ip_id = ensure_public_ip(
            provider,
            request.resource_group,
            request.location,
            request.public_ip_name.strip(),
            context,
        )

    descriptor = NetworkInterfaceDescriptor(
        name=network_interface_name(request.name),
        location=request.location,
        subnet_id=subnet_id,
        public_ip_id=public_ip_id,
    )

    logger.info(f"Creating network interface {descriptor.name} using subnet {vnet_name}/{subnet_name}")
    try:
        poller = provider.network_interfaces.begin_create_or_update(
            request.resource_group, descriptor.name, descriptor.to_payload(), **provider.lro_options()
        )
    except Exception as e:
        raise NetworkInterfaceCreateError(
            LogSanitizer.create_safe_error_message(
                e, f"failed to create network interface {descriptor.name}"
            ),
            resource_name=descriptor.name,
        ) from e

    try:
        nic = wait_for_completion(poller, f"network interface {descriptor.name} creation", context)
    except ProvisioningError:
        raise
    except Exception as e:
        raise NetworkInterfaceCreateError(
            LogSanitizer.create_safe_error_message(
                e, f"failed while creating network interface {descriptor.name}"
            ),
            resource_name=descriptor.name,
        ) from e

    nic_id = getattr(nic, "id", None)
    if not nic_id:
        raise NetworkInterfaceMissingIDError(
            f"created network interface {descriptor.name} has no resource ID",
            resource_name=descriptor.name,
        )

    logger.info(f"Network interface {descriptor.name} ready")
    return nic_id
