"""Post-creation address lookup.

Reads the private address from the primary NIC's first IP configuration and,
when that configuration references a public IP, the public address too.

Every parse or fetch failure is raised as AddressResolutionError; deciding
that this lookup is only best-effort is left to the caller. The exception's
``partial`` attribute keeps the private address when only the public lookup
failed.

Public API:
    ResolvedAddresses: private/public address pair
    resolve_addresses: Look up the addresses of a created VM
"""

import logging
from dataclasses import dataclass
from typing import Any

from azprovision.exceptions import AddressResolutionError, ContractViolationError
from azprovision.log_sanitizer import LogSanitizer
from azprovision.resource_id import parse_resource_id

logger = logging.getLogger(__name__)

__all__ = ["ResolvedAddresses", "primary_network_interface_id", "resolve_addresses"]

NETWORK_INTERFACE_TYPE = "Microsoft.Network/networkInterfaces"
PUBLIC_IP_TYPE = "Microsoft.Network/publicIPAddresses"


@dataclass(frozen=True)
class ResolvedAddresses:
    private_ip: str = ""
    public_ip: str = ""


def primary_network_interface_id(vm: Any) -> str:
    """Return the primary NIC id of a VM model, or "" when it has none.

    The reference flagged primary wins; otherwise the first reference is used.
    """
    network_profile = getattr(vm, "network_profile", None)
    references = list(getattr(network_profile, "network_interfaces", None) or [])
    references = [ref for ref in references if ref is not None]
    if not references:
        return ""

    primary = next((ref for ref in references if getattr(ref, "primary", None)), references[0])
    return (getattr(primary, "id", None) or "").strip()


def _parse(resource_id: str, expected_type: str, what: str, partial: ResolvedAddresses):
    try:
        return parse_resource_id(resource_id, expected_type)
    except ContractViolationError as e:
        raise AddressResolutionError(f"failed to parse {what} ID: {e}", partial=partial) from e


def resolve_addresses(provider: Any, vm: Any) -> ResolvedAddresses:
    """Resolve the private and public IP of a created VM.

    Args:
        provider: AzureProvider (or compatible)
        vm: VirtualMachine model returned by the create operation

    Returns:
        ResolvedAddresses; empty when the VM has no NIC reference or the NIC
        has no IP configuration

    Raises:
        AddressResolutionError: A resource id could not be parsed or a
            lookup failed
    """
    nic_id = primary_network_interface_id(vm)
    if not nic_id:
        return ResolvedAddresses()

    empty = ResolvedAddresses()
    nic_ref = _parse(nic_id, NETWORK_INTERFACE_TYPE, "primary NIC", empty)

    try:
        nic = provider.network_interfaces.get(nic_ref.resource_group, nic_ref.name)
    except Exception as e:
        raise AddressResolutionError(
            LogSanitizer.create_safe_error_message(
                e, f"failed to get primary network interface {nic_ref.name}"
            ),
            partial=empty,
            resource_name=nic_ref.name,
        ) from e

    ip_configurations = getattr(nic, "ip_configurations", None) or []
    if not ip_configurations or ip_configurations[0] is None:
        return empty

    ip_configuration = ip_configurations[0]
    private_ip = getattr(ip_configuration, "private_ip_address", None) or ""
    resolved = ResolvedAddresses(private_ip=private_ip)

    public_ref = getattr(ip_configuration, "public_ip_address", None)
    public_ip_id = (getattr(public_ref, "id", None) or "").strip()
    if not public_ip_id:
        return resolved

    pip_ref = _parse(public_ip_id, PUBLIC_IP_TYPE, "public IP resource", resolved)
    try:
        public_ip = provider.public_ip_addresses.get(pip_ref.resource_group, pip_ref.name)
    except Exception as e:
        raise AddressResolutionError(
            LogSanitizer.create_safe_error_message(
                e, f"failed to get public IP resource {pip_ref.name}"
            ),
            partial=resolved,
            resource_name=pip_ref.name,
        ) from e

    return ResolvedAddresses(
        private_ip=private_ip, public_ip=getattr(public_ip, "ip_address", None) or ""
    )
