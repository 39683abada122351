"""ARM resource identifier parsing.

Philosophy:
- Single responsibility: turn caller or provider strings into structured identity
- Pure functions, no I/O
- Standard library only

Accepted inputs:
- "my-nic" -> bare name
- "/subscriptions/S/resourceGroups/G/providers/Microsoft.Network/networkInterfaces/N"
- The same path URL-encoded ("%2Fsubscriptions%2FS%2F...")

Public API:
    ResourceIdentifier: Parsed identifier
    parse_resource_id: Parse and optionally type-check an identifier
    resource_name: Normalize a name-or-id value to its trailing name segment
"""

from dataclasses import dataclass
from urllib.parse import unquote

from azprovision.exceptions import (
    MalformedIdentifierError,
    MissingResourceGroupError,
    MissingResourceNameError,
    UnexpectedResourceTypeError,
)

__all__ = ["ResourceIdentifier", "parse_resource_id", "resource_name"]


@dataclass(frozen=True)
class ResourceIdentifier:
    """Structured ARM resource identifier.

    Bare names carry only ``name``; every other field is None.
    ``resource_type`` joins nested types, e.g. "virtualNetworks/subnets".
    """

    name: str
    resource_group: str | None = None
    subscription_id: str | None = None
    provider_namespace: str | None = None
    resource_type: str | None = None

    @property
    def is_bare_name(self) -> bool:
        return self.resource_group is None


def _segment_after(parts: list[str], marker: str) -> str | None:
    for i in range(len(parts) - 1):
        if parts[i].lower() == marker:
            return parts[i + 1]
    return None


def parse_resource_id(value: str, expected_type: str | None = None) -> ResourceIdentifier:
    """Parse an ARM resource identifier.

    Args:
        value: Bare name, ARM path, or URL-encoded ARM path
        expected_type: Optional type segment the path must contain,
            e.g. "networkInterfaces" (case-insensitive)

    Returns:
        ResourceIdentifier

    Raises:
        MalformedIdentifierError: Empty value or fewer than two segments
        UnexpectedResourceTypeError: Path does not contain expected_type
        MissingResourceGroupError: No resourceGroups segment with a value
        MissingResourceNameError: Trailing name segment is empty

    Example:
        >>> rid = parse_resource_id(
        ...     "/subscriptions/s/resourceGroups/rg1/providers/Microsoft.Network/networkInterfaces/nic1",
        ...     "networkInterfaces",
        ... )
        >>> (rid.resource_group, rid.name)
        ('rg1', 'nic1')
    """
    trimmed = (value or "").strip()
    if not trimmed:
        raise MalformedIdentifierError("resource ID is empty")

    # unquote is a no-op on already-decoded input
    decoded = unquote(trimmed).strip()
    if "/" not in decoded:
        return ResourceIdentifier(name=decoded)

    normalized = decoded.strip("/")
    parts = normalized.split("/")
    if len(parts) < 2:
        raise MalformedIdentifierError(f"invalid resource ID: {value}")

    if expected_type:
        token = "/" + expected_type.strip("/").lower() + "/"
        if token not in "/" + normalized.lower():
            raise UnexpectedResourceTypeError(
                f"resource ID {value!r} is not a {expected_type} resource"
            )

    resource_group = (_segment_after(parts, "resourcegroups") or "").strip()
    if not resource_group:
        raise MissingResourceGroupError(f"resource group segment not found in {value!r}")

    name = parts[-1].strip()
    if not name:
        raise MissingResourceNameError(f"resource name segment not found in {value!r}")

    namespace = None
    resource_type = None
    for i in range(len(parts) - 1):
        if parts[i].lower() == "providers":
            namespace = parts[i + 1]
            type_segments = parts[i + 2 :: 2]
            resource_type = "/".join(type_segments) or None
            break

    return ResourceIdentifier(
        name=name,
        resource_group=resource_group,
        subscription_id=_segment_after(parts, "subscriptions"),
        provider_namespace=namespace,
        resource_type=resource_type,
    )


def resource_name(value: str | None) -> str:
    """Return the trailing name segment of a name-or-id value.

    Empty input yields "". Used to normalize virtual network and subnet
    names that may arrive as full ARM ids from a resource picker.

    Example:
        >>> resource_name("/subscriptions/s/resourceGroups/rg/providers/Microsoft.Network/virtualNetworks/vnet1")
        'vnet1'
        >>> resource_name("vnet1")
        'vnet1'
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return ""
    decoded = unquote(trimmed).strip().rstrip("/")
    if "/" not in decoded:
        return decoded
    return decoded.rsplit("/", 1)[-1].strip()
