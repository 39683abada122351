"""Public IP ensure-or-create.

Looks a public IP up by name and creates it only on a confirmed "not found".
Throttling, authorization and transport failures on the lookup are reported
as PublicIPLookupError instead of being treated as absence.

Two concurrent callers ensuring the same name can both observe "not found"
and both submit a create; ARM then either merges the two create-or-update
calls or rejects one with a conflict. No lease or compare-and-create step
guards against this.

Public API:
    PublicIPDescriptor: Creation payload for a Standard static IPv4 address
    ensure_public_ip: Return the id of an existing or newly created public IP
"""

import logging
from dataclasses import dataclass
from typing import Any

from azure.mgmt.network.models import PublicIPAddress, PublicIPAddressSku

from azprovision.azure_errors import is_not_found_error
from azprovision.exceptions import ProvisioningError, PublicIPCreateError, PublicIPLookupError
from azprovision.log_sanitizer import LogSanitizer
from azprovision.long_running import OperationContext, wait_for_completion

logger = logging.getLogger(__name__)

__all__ = ["PublicIPDescriptor", "ensure_public_ip"]


@dataclass(frozen=True)
class PublicIPDescriptor:
    """Public IP to create: Standard SKU, static IPv4."""

    name: str
    location: str
    sku: str = "Standard"
    allocation_method: str = "Static"
    address_version: str = "IPv4"

    def to_payload(self) -> PublicIPAddress:
        return PublicIPAddress(
            location=self.location,
            sku=PublicIPAddressSku(name=self.sku),
            public_ip_allocation_method=self.allocation_method,
            public_ip_address_version=self.address_version,
        )


def ensure_public_ip(
    provider: Any,
    resource_group: str,
    location: str,
    name: str,
    context: OperationContext | None = None,
) -> str:
    """Return the resource id of public IP ``name``, creating it if absent.

    Args:
        provider: AzureProvider (or compatible)
        resource_group: Resource group holding the public IP
        location: Region used when the address has to be created
        name: Public IP name
        context: Optional cancellation/deadline for the create wait

    Returns:
        Public IP resource id

    Raises:
        PublicIPLookupError: Lookup failed for a reason other than "not found"
        PublicIPCreateError: Create failed or the result carried no id
        OperationCancelledError: Caller cancelled the create wait
    """
    try:
        existing = provider.public_ip_addresses.get(resource_group, name)
    except Exception as e:
        if not is_not_found_error(e):
            raise PublicIPLookupError(
                LogSanitizer.create_safe_error_message(e, f"failed to get public IP {name}"),
                resource_name=name,
            ) from e
        logger.info(f"Public IP {name} not found, creating it in {location}")
    else:
        existing_id = getattr(existing, "id", None)
        if existing_id:
            logger.info(f"Using existing public IP {name}")
            return existing_id
        # Found but without an id: treat the same as an absent address
        logger.warning(f"Public IP {name} returned without an id, recreating it")

    descriptor = PublicIPDescriptor(name=name, location=location)
    try:
        poller = provider.public_ip_addresses.begin_create_or_update(
            resource_group, name, descriptor.to_payload(), **provider.lro_options()
        )
    except Exception as e:
        raise PublicIPCreateError(
            LogSanitizer.create_safe_error_message(e, f"failed to create public IP {name}"),
            resource_name=name,
        ) from e

    try:
        created = wait_for_completion(poller, f"public IP {name} creation", context)
    except ProvisioningError:
        raise
    except Exception as e:
        raise PublicIPCreateError(
            LogSanitizer.create_safe_error_message(
                e, f"failed waiting for public IP {name} creation"
            ),
            resource_name=name,
        ) from e

    public_ip_id = getattr(created, "id", None)
    if not public_ip_id:
        raise PublicIPCreateError(f"public IP {name} was created without an id", resource_name=name)

    logger.info(f"Created public IP {name}")
    return public_ip_id
