"""VM creation request model and validation.

This module defines the declarative request accepted by the orchestrator,
the well-known image references and VM sizes, and the validator that runs
before any remote call.

Security:
- admin_password and custom_data are excluded from repr()
- Validation performs no network I/O

Public API:
    CreationRequest: What to create
    CreationResult: What was created
    ImageReference: publisher/offer/sku/version tuple
    OSDiskType: Supported managed-disk tiers
    validate_request: Completeness and consistency checks
    resolve_image: Map an alias or URN to an ImageReference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from azprovision.exceptions import (
    AmbiguousNetworkPlacementError,
    MissingFieldError,
    RequestValidationError,
    UnsupportedDiskTypeError,
)

__all__ = [
    "COMMON_VM_SIZES",
    "DEFAULT_IMAGE",
    "DEFAULT_OS_DISK_TYPE",
    "IMAGE_FIELD_KEYS",
    "UBUNTU_1804_LTS",
    "UBUNTU_2004_LTS",
    "WINDOWS_SERVER_2019",
    "WINDOWS_SERVER_2022",
    "CreationRequest",
    "CreationResult",
    "ImageReference",
    "OSDiskType",
    "list_well_known_images",
    "resolve_image",
    "validate_request",
]


class OSDiskType(StrEnum):
    """Managed-disk storage tiers accepted for the OS disk."""

    STANDARD_HDD = "Standard_LRS"
    STANDARD_SSD = "StandardSSD_LRS"
    PREMIUM_SSD = "Premium_LRS"


DEFAULT_OS_DISK_TYPE = OSDiskType.STANDARD_SSD


@dataclass(frozen=True)
class ImageReference:
    """Marketplace image reference."""

    publisher: str
    offer: str
    sku: str
    version: str = "latest"

    @property
    def urn(self) -> str:
        return f"{self.publisher}:{self.offer}:{self.sku}:{self.version}"

    @classmethod
    def from_urn(cls, urn: str) -> ImageReference:
        """Parse "publisher:offer:sku[:version]".

        Raises:
            ValueError: If the URN does not have 3 or 4 non-empty parts
        """
        parts = [p.strip() for p in urn.split(":")]
        if len(parts) not in (3, 4) or not all(parts):
            raise ValueError(
                f"Invalid image URN: '{urn}'. Expected publisher:offer:sku[:version]"
            )
        if len(parts) == 3:
            parts.append("latest")
        return cls(publisher=parts[0], offer=parts[1], sku=parts[2], version=parts[3])


UBUNTU_1804_LTS = ImageReference("Canonical", "UbuntuServer", "18.04-LTS", "latest")
UBUNTU_2004_LTS = ImageReference(
    "Canonical", "0001-com-ubuntu-server-focal", "20_04-lts-gen2", "latest"
)
WINDOWS_SERVER_2019 = ImageReference(
    "MicrosoftWindowsServer", "WindowsServer", "2019-Datacenter", "latest"
)
WINDOWS_SERVER_2022 = ImageReference(
    "MicrosoftWindowsServer", "WindowsServer", "2022-datacenter-azure-edition", "latest"
)

DEFAULT_IMAGE = UBUNTU_2004_LTS

# Alias -> image (lookup is case-insensitive)
_WELL_KNOWN_IMAGES: dict[str, ImageReference] = {
    "ubuntu1804": UBUNTU_1804_LTS,
    "18.04": UBUNTU_1804_LTS,
    "ubuntu2004": UBUNTU_2004_LTS,
    "20.04": UBUNTU_2004_LTS,
    "windows2019": WINDOWS_SERVER_2019,
    "windows2022": WINDOWS_SERVER_2022,
}

COMMON_VM_SIZES = [
    "Standard_B1s",
    "Standard_B1ms",
    "Standard_B2s",
    "Standard_D2s_v3",
    "Standard_D4s_v3",
    "Standard_D8s_v3",
    "Standard_F2s_v2",
    "Standard_F4s_v2",
    "Standard_F8s_v2",
    "Standard_E2s_v3",
    "Standard_E4s_v3",
    "Standard_E8s_v3",
]


def list_well_known_images() -> dict[str, ImageReference]:
    """Return a copy of the alias -> ImageReference table."""
    return _WELL_KNOWN_IMAGES.copy()


def resolve_image(identifier: str) -> ImageReference:
    """Resolve an image alias or URN.

    Args:
        identifier: Alias ("ubuntu2004", "windows2022", ...) or
            "publisher:offer:sku[:version]"

    Returns:
        ImageReference

    Raises:
        ValueError: If the identifier is neither a known alias nor a URN

    Example:
        >>> resolve_image("Ubuntu2004").sku
        '20_04-lts-gen2'
    """
    if ":" in identifier:
        return ImageReference.from_urn(identifier)

    normalized = identifier.strip().lower()
    if normalized in _WELL_KNOWN_IMAGES:
        return _WELL_KNOWN_IMAGES[normalized]

    supported = "\n".join(
        f"  - {alias}: {image.urn}" for alias, image in _WELL_KNOWN_IMAGES.items()
    )
    raise ValueError(
        f"Unsupported image: '{identifier}'\n\n"
        f"Supported aliases:\n{supported}\n\n"
        f"Or provide a full URN (e.g., {DEFAULT_IMAGE.urn})"
    )


# Request field -> configuration key used by workflow definitions
_CAMEL_CASE_KEYS = {
    "resourceGroup": "resource_group",
    "name": "name",
    "location": "location",
    "size": "size",
    "adminUsername": "admin_username",
    "adminPassword": "admin_password",
    "networkInterfaceId": "network_interface_id",
    "virtualNetworkName": "virtual_network_name",
    "subnetName": "subnet_name",
    "publicIpName": "public_ip_name",
    "osDiskType": "os_disk_type",
    "osDiskSizeGB": "os_disk_size_gb",
    "customData": "custom_data",
    "tags": "tags",
}

_IMAGE_KEYS = {
    "publisher": ("imagePublisher", "image_publisher"),
    "offer": ("imageOffer", "image_offer"),
    "sku": ("imageSku", "image_sku"),
    "version": ("imageVersion", "image_version"),
}

IMAGE_FIELD_KEYS = tuple(key for keys in _IMAGE_KEYS.values() for key in keys)


def _normalize_tags(raw: Any) -> dict[str, str]:
    """Accept {"k": "v"} or [{"key": "k", "value": "v"}]; drop blank keys."""
    if not raw:
        return {}
    items: list[tuple[Any, Any]]
    if isinstance(raw, dict):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = []
        for entry in raw:
            if not isinstance(entry, dict):
                raise ValueError(f"tag entries must be key/value mappings, got {entry!r}")
            items.append((entry.get("key"), entry.get("value")))
    else:
        raise ValueError(f"tags must be a mapping or a list of key/value mappings, got {raw!r}")
    tags = {}
    for key, value in items:
        key = str(key or "").strip()
        if key:
            tags[key] = str(value if value is not None else "").strip()
    return tags


def _parse_disk_size(raw: Any) -> int | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValueError(f"osDiskSizeGB must be an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"osDiskSizeGB must be an integer, got {raw!r}") from e


@dataclass
class CreationRequest:
    """Declarative VM creation request.

    Network placement is either ``network_interface_id`` or the
    (``virtual_network_name``, ``subnet_name``) pair; when both are set the
    explicit NIC wins. ``public_ip_name`` only applies when a NIC is created.
    """

    resource_group: str
    name: str
    location: str
    size: str
    admin_username: str
    admin_password: str = field(default="", repr=False)
    image: ImageReference = DEFAULT_IMAGE
    network_interface_id: str = ""
    virtual_network_name: str = ""
    subnet_name: str = ""
    public_ip_name: str = ""
    os_disk_type: str = ""
    os_disk_size_gb: int | None = None
    custom_data: str | None = field(default=None, repr=False)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def has_explicit_network_interface(self) -> bool:
        return bool(self.network_interface_id.strip())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreationRequest:
        """Build a request from a configuration mapping.

        Accepts camelCase keys (resourceGroup, imagePublisher, ...) or the
        snake_case field names. Image fields missing or blank default to
        Ubuntu 20.04 LTS one by one; an "image" key may hold an alias, URN,
        or a publisher/offer/sku/version mapping.
        """
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key in _CAMEL_CASE_KEYS:
                values[_CAMEL_CASE_KEYS[key]] = value
            elif key in _CAMEL_CASE_KEYS.values():
                values[key] = value

        image = DEFAULT_IMAGE
        raw_image = data.get("image")
        if isinstance(raw_image, str) and raw_image.strip():
            image = resolve_image(raw_image)
        elif isinstance(raw_image, dict):
            image = ImageReference(
                publisher=str(raw_image.get("publisher") or DEFAULT_IMAGE.publisher),
                offer=str(raw_image.get("offer") or DEFAULT_IMAGE.offer),
                sku=str(raw_image.get("sku") or DEFAULT_IMAGE.sku),
                version=str(raw_image.get("version") or DEFAULT_IMAGE.version),
            )

        overrides = {}
        for attr, keys in _IMAGE_KEYS.items():
            for key in keys:
                if str(data.get(key) or "").strip():
                    overrides[attr] = str(data[key]).strip()
                    break
        if overrides:
            image = ImageReference(
                publisher=overrides.get("publisher", image.publisher),
                offer=overrides.get("offer", image.offer),
                sku=overrides.get("sku", image.sku),
                version=overrides.get("version", image.version),
            )

        disk_size = _parse_disk_size(values.pop("os_disk_size_gb", None))
        tags = _normalize_tags(values.pop("tags", None))
        custom_data = values.pop("custom_data", None)
        strings = {k: str(v if v is not None else "") for k, v in values.items()}

        return cls(
            resource_group=strings.get("resource_group", ""),
            name=strings.get("name", ""),
            location=strings.get("location", ""),
            size=strings.get("size", ""),
            admin_username=strings.get("admin_username", ""),
            admin_password=strings.get("admin_password", ""),
            image=image,
            network_interface_id=strings.get("network_interface_id", ""),
            virtual_network_name=strings.get("virtual_network_name", ""),
            subnet_name=strings.get("subnet_name", ""),
            public_ip_name=strings.get("public_ip_name", ""),
            os_disk_type=strings.get("os_disk_type", ""),
            os_disk_size_gb=disk_size,
            custom_data=str(custom_data) if custom_data is not None else None,
            tags=tags,
        )


@dataclass(frozen=True)
class CreationResult:
    """Fully resolved VM after a successful creation."""

    id: str
    name: str
    provisioning_state: str
    location: str
    size: str
    public_ip: str = ""
    private_ip: str = ""
    admin_username: str = ""

    def to_dict(self) -> dict[str, str]:
        """Output payload keyed the way workflow consumers expect."""
        return {
            "id": self.id,
            "name": self.name,
            "provisioningState": self.provisioning_state,
            "location": self.location,
            "size": self.size,
            "publicIp": self.public_ip,
            "privateIp": self.private_ip,
            "adminUsername": self.admin_username,
        }


def _require(value: str | None, field_name: str, label: str) -> None:
    if not (value or "").strip():
        raise MissingFieldError(field_name, f"{label} is required")


def validate_request(request: CreationRequest) -> None:
    """Validate a creation request. No remote calls are made.

    Raises:
        MissingFieldError: A required field is empty (``field_name`` names it)
        AmbiguousNetworkPlacementError: No usable network placement
        UnsupportedDiskTypeError: OS disk type outside OSDiskType
    """
    _require(request.resource_group, "resource_group", "resource group")
    _require(request.name, "name", "VM name")
    _require(request.location, "location", "location")
    _require(request.size, "size", "VM size")
    _require(request.admin_username, "admin_username", "admin username")
    _require(request.admin_password, "admin_password", "admin password")

    if not request.has_explicit_network_interface and (
        not request.virtual_network_name.strip() or not request.subnet_name.strip()
    ):
        raise AmbiguousNetworkPlacementError(
            "either networkInterfaceId or (virtualNetworkName and subnetName) is required"
        )

    image = request.image
    if image is None:
        raise MissingFieldError("image", "image is required")
    _require(image.publisher, "image.publisher", "image publisher")
    _require(image.offer, "image.offer", "image offer")
    _require(image.sku, "image.sku", "image SKU")
    _require(image.version, "image.version", "image version")

    disk_type = request.os_disk_type.strip()
    if disk_type and disk_type not in {t.value for t in OSDiskType}:
        raise UnsupportedDiskTypeError(f"unsupported OS disk type: {request.os_disk_type}")

    if request.os_disk_size_gb is not None and request.os_disk_size_gb <= 0:
        raise RequestValidationError(
            f"OS disk size must be positive, got {request.os_disk_size_gb}"
        )
