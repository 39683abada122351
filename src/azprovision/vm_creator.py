"""VM create-and-wait orchestration.

Runs one VM creation from request to resolved result:

    validate -> resolve network interface -> submit -> poll -> resolve addresses

Each step depends on the id produced by the one before it, so the steps run
strictly in sequence on the calling thread. Nothing is retried here; the SDK
poller governs transient errors while polling, and anything it raises is
final.

Failure surface:
- RequestValidationError: nothing remote was touched
- DependencyResolutionError: no VM exists; a NIC or public IP may remain
- SubmissionError: the VM create was never accepted
- ProvisioningFailedError: the VM create was accepted and then failed
- InvalidProviderResponseError: the create "succeeded" without id or name
- OperationCancelledError: the caller stopped waiting

Address lookup failures after a successful create are logged as warnings and
never fail the call.

Public API:
    CreationPhase: Orchestration states reported to phase callbacks
    VMCreator: Orchestrator bound to one AzureProvider
    create_vm: One-shot convenience wrapper
"""

import base64
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from azure.mgmt.compute.models import (
    HardwareProfile,
    ImageReference,
    ManagedDiskParameters,
    NetworkInterfaceReference,
    NetworkProfile,
    OSDisk,
    OSProfile,
    StorageProfile,
    VirtualMachine,
)

from azprovision.address_resolver import ResolvedAddresses, resolve_addresses
from azprovision.exceptions import (
    AddressResolutionError,
    InvalidProviderResponseError,
    ProvisioningError,
    ProvisioningFailedError,
    SubmissionError,
)
from azprovision.log_sanitizer import LogSanitizer
from azprovision.long_running import OperationContext, wait_for_completion
from azprovision.network_interface import resolve_network_interface
from azprovision.vm_request import (
    DEFAULT_OS_DISK_TYPE,
    CreationRequest,
    CreationResult,
    validate_request,
)

logger = logging.getLogger(__name__)

__all__ = ["CreationPhase", "PhaseCallback", "VMCreator", "create_vm", "encode_custom_data"]


class CreationPhase(StrEnum):
    """Orchestration states, in the order they are entered."""

    VALIDATING = "validating"
    RESOLVING_NETWORK = "resolving_network"
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


PhaseCallback = Callable[[CreationPhase, str], None]


def encode_custom_data(custom_data: str | None) -> str | None:
    """Base64-encode cloud-init custom data; blank data yields None.

    Example:
        >>> encode_custom_data("#cloud-config")
        'I2Nsb3VkLWNvbmZpZw=='
        >>> encode_custom_data("   ") is None
        True
    """
    if custom_data is None or not custom_data.strip():
        return None
    return base64.b64encode(custom_data.encode("utf-8")).decode("ascii")


class VMCreator:
    """Create Azure VMs and wait for them to finish provisioning.

    Example:
        >>> creator = VMCreator(provider)
        >>> result = creator.create_vm(request, OperationContext(timeout=1800))  # doctest: +SKIP
        >>> result.provisioning_state  # doctest: +SKIP
        'Succeeded'
    """

    def __init__(self, provider: Any, phase_callback: PhaseCallback | None = None):
        self.provider = provider
        self.phase_callback = phase_callback

    def _enter(self, phase: CreationPhase, message: str) -> None:
        if phase == CreationPhase.FAILED:
            logger.error(message)
        else:
            logger.info(message)
        if self.phase_callback:
            self.phase_callback(phase, message)

    def build_vm_payload(self, request: CreationRequest, network_interface_id: str) -> VirtualMachine:
        """Assemble the virtual machine create payload as an SDK model.

        Optional fields are left out of the model when unset.
        """
        image = request.image
        os_disk: dict[str, Any] = {
            "create_option": "FromImage",
            "managed_disk": ManagedDiskParameters(
                storage_account_type=request.os_disk_type.strip() or DEFAULT_OS_DISK_TYPE.value
            ),
        }
        if request.os_disk_size_gb:
            os_disk["disk_size_gb"] = request.os_disk_size_gb

        os_profile: dict[str, Any] = {
            "computer_name": request.name,
            "admin_username": request.admin_username,
            "admin_password": request.admin_password,
        }
        custom_data = encode_custom_data(request.custom_data)
        if custom_data is not None:
            os_profile["custom_data"] = custom_data

        optional: dict[str, Any] = {}
        if request.tags:
            optional["tags"] = dict(request.tags)

        return VirtualMachine(
            location=request.location,
            hardware_profile=HardwareProfile(vm_size=request.size),
            storage_profile=StorageProfile(
                image_reference=ImageReference(
                    publisher=image.publisher,
                    offer=image.offer,
                    sku=image.sku,
                    version=image.version,
                ),
                os_disk=OSDisk(**os_disk),
            ),
            os_profile=OSProfile(**os_profile),
            network_profile=NetworkProfile(
                network_interfaces=[
                    NetworkInterfaceReference(id=network_interface_id, primary=True)
                ]
            ),
            **optional,
        )

    def create_vm(
        self, request: CreationRequest, context: OperationContext | None = None
    ) -> CreationResult:
        """Create a VM and return its resolved state.

        Args:
            request: What to create
            context: Optional cancellation/deadline for the long-running waits

        Returns:
            CreationResult (addresses are best-effort and may be empty)

        Raises:
            ProvisioningError: See module docstring for the subclasses
        """
        try:
            return self._create_vm(request, context)
        except ProvisioningError as e:
            self._enter(CreationPhase.FAILED, f"VM creation failed [{e.kind}]: {e}")
            raise

    def _create_vm(self, request: CreationRequest, context: OperationContext | None) -> CreationResult:
        self._enter(CreationPhase.VALIDATING, f"Validating request for VM {request.name}")
        validate_request(request)

        self._enter(
            CreationPhase.RESOLVING_NETWORK,
            f"Starting VM creation: name={request.name}, location={request.location}, "
            f"size={request.size}",
        )
        network_interface_id = resolve_network_interface(self.provider, request, context)

        payload = self.build_vm_payload(request, network_interface_id)
        logger.debug(f"VM payload: {LogSanitizer.sanitize_dict(payload.as_dict())}")

        self._enter(CreationPhase.SUBMITTING, "Initiating VM creation with Azure Compute API")
        try:
            poller = self.provider.virtual_machines.begin_create_or_update(
                request.resource_group, request.name, payload, **self.provider.lro_options()
            )
        except Exception as e:
            raise SubmissionError(
                LogSanitizer.create_safe_error_message(e, "failed to begin VM creation"),
                resource_name=request.name,
            ) from e

        self._enter(CreationPhase.POLLING, "VM creation initiated, polling until completion...")
        try:
            vm = wait_for_completion(poller, f"VM {request.name} creation", context)
        except ProvisioningError:
            raise
        except Exception as e:
            raise ProvisioningFailedError(
                LogSanitizer.create_safe_error_message(
                    e, "VM creation failed during provisioning"
                ),
                resource_name=request.name,
            ) from e

        vm_id = getattr(vm, "id", None)
        vm_name = getattr(vm, "name", None)
        if not vm_id or not vm_name:
            raise InvalidProviderResponseError(
                "invalid VM response: missing ID or Name", resource_name=request.name
            )

        hardware_profile = getattr(vm, "hardware_profile", None)
        provisioning_state = getattr(vm, "provisioning_state", None) or "Unknown"
        location = getattr(vm, "location", None) or ""
        size = getattr(hardware_profile, "vm_size", None) or ""
        # SDK enums carry the ARM string in .value
        size = getattr(size, "value", size)

        try:
            addresses = resolve_addresses(self.provider, vm)
        except AddressResolutionError as e:
            logger.warning(f"VM created but failed to resolve NIC IP addresses: {e}")
            addresses = e.partial or ResolvedAddresses()

        result = CreationResult(
            id=vm_id,
            name=vm_name,
            provisioning_state=str(provisioning_state),
            location=location,
            size=str(size),
            public_ip=addresses.public_ip,
            private_ip=addresses.private_ip,
            admin_username=request.admin_username,
        )
        self._enter(
            CreationPhase.SUCCEEDED,
            f"VM created successfully: id={result.id}, state={result.provisioning_state}",
        )
        return result


def create_vm(
    provider: Any, request: CreationRequest, context: OperationContext | None = None
) -> CreationResult:
    """Create a VM with a one-off VMCreator."""
    return VMCreator(provider).create_vm(request, context)
