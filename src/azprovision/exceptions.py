"""Exception hierarchy for VM provisioning.

Every failure surfaced by the orchestrator is a ProvisioningError subclass
carrying a stable ``kind`` string, so callers can branch on the category
without parsing messages.

Categories:
    RequestValidationError: request rejected before any remote call
    DependencyResolutionError: subnet / public IP / NIC could not be resolved
    SubmissionError: the VM create operation was never accepted
    ProvisioningFailedError: the VM create operation failed after acceptance
    ContractViolationError: provider or caller data could not be interpreted
    OperationCancelledError: the caller cancelled a long-running wait
    AddressResolutionError: best-effort address lookup failed
"""


class ProvisioningError(Exception):
    """Base exception for VM provisioning errors."""

    kind = "ProvisioningError"

    def __init__(self, message: str, resource_name: str | None = None):
        super().__init__(message)
        self.resource_name = resource_name


# Validation


class RequestValidationError(ProvisioningError):
    """Creation request is incomplete or inconsistent."""

    kind = "ValidationError"


class MissingFieldError(RequestValidationError):
    """A required request field is empty."""

    kind = "MissingField"

    def __init__(self, field_name: str, message: str):
        super().__init__(message)
        self.field_name = field_name


class UnsupportedDiskTypeError(RequestValidationError):
    """OS disk type is not one of the supported managed-disk tiers."""

    kind = "UnsupportedDiskType"


class AmbiguousNetworkPlacementError(RequestValidationError):
    """Neither a NIC id nor a (virtual network, subnet) pair was supplied."""

    kind = "AmbiguousNetworkPlacement"


# Dependency resolution


class DependencyResolutionError(ProvisioningError):
    """A resource the VM depends on could not be resolved."""

    kind = "DependencyResolutionFailed"


class SubnetResolutionError(DependencyResolutionError):
    kind = "SubnetResolutionFailed"


class SubnetMissingIDError(DependencyResolutionError):
    kind = "SubnetMissingID"


class PublicIPLookupError(DependencyResolutionError):
    kind = "PublicIPLookupFailed"


class PublicIPCreateError(DependencyResolutionError):
    kind = "PublicIPCreateFailed"


class NetworkInterfaceCreateError(DependencyResolutionError):
    kind = "NetworkInterfaceCreateFailed"


class NetworkInterfaceMissingIDError(DependencyResolutionError):
    kind = "NetworkInterfaceMissingID"


# VM operation


class SubmissionError(ProvisioningError):
    """The create operation was rejected before it started."""

    kind = "SubmissionFailed"


class ProvisioningFailedError(ProvisioningError):
    """The create operation was accepted but failed while running."""

    kind = "ProvisioningFailed"


# Contract violations


class ContractViolationError(ProvisioningError):
    """Data returned by the provider or caller cannot be interpreted."""

    kind = "ContractViolation"


class InvalidProviderResponseError(ContractViolationError):
    kind = "InvalidProviderResponse"


class MalformedIdentifierError(ContractViolationError):
    kind = "MalformedIdentifier"


class MissingResourceGroupError(ContractViolationError):
    kind = "MissingResourceGroup"


class MissingResourceNameError(ContractViolationError):
    kind = "MissingResourceName"


class UnexpectedResourceTypeError(ContractViolationError):
    kind = "UnexpectedResourceType"


# Waiting


class OperationCancelledError(ProvisioningError):
    """Caller cancelled while a long-running operation was in flight."""

    kind = "Cancelled"


class OperationTimeoutError(OperationCancelledError):
    """Caller deadline expired while a long-running operation was in flight."""

    kind = "DeadlineExceeded"


# Best-effort lookups


class AddressResolutionError(ProvisioningError):
    """Post-creation address lookup failed.

    ``partial`` holds the addresses resolved before the failure.
    """

    kind = "AddressResolutionFailed"

    def __init__(self, message: str, partial=None, resource_name: str | None = None):
        super().__init__(message, resource_name=resource_name)
        self.partial = partial


__all__ = [
    "AddressResolutionError",
    "AmbiguousNetworkPlacementError",
    "ContractViolationError",
    "DependencyResolutionError",
    "InvalidProviderResponseError",
    "MalformedIdentifierError",
    "MissingFieldError",
    "MissingResourceGroupError",
    "MissingResourceNameError",
    "NetworkInterfaceCreateError",
    "NetworkInterfaceMissingIDError",
    "OperationCancelledError",
    "OperationTimeoutError",
    "ProvisioningError",
    "ProvisioningFailedError",
    "PublicIPCreateError",
    "PublicIPLookupError",
    "RequestValidationError",
    "SubmissionError",
    "SubnetMissingIDError",
    "SubnetResolutionError",
    "UnexpectedResourceTypeError",
    "UnsupportedDiskTypeError",
]
