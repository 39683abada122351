"""Classification of Azure SDK errors.

Distinguishes a confirmed "resource does not exist" answer from every other
failure, so ensure-or-create logic only creates on confirmed absence.

Classification order:
1. ResourceNotFoundError (azure-core maps HTTP 404 to it)
2. HttpResponseError with status 404 or an ARM error code of
   NotFound / ResourceNotFound (case-insensitive)
3. Text fallback ("notfound" / "not found") only when the error carries no
   structured status or code

Public API:
    is_not_found_error: True when the error means the resource is absent
    error_code: Extract the ARM error code, if any
"""

from typing import Any

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

__all__ = ["NOT_FOUND_ERROR_CODES", "error_code", "is_not_found_error"]

NOT_FOUND_ERROR_CODES = frozenset({"notfound", "resourcenotfound"})


def error_code(error: Any) -> str | None:
    """Return the ARM error code carried by an SDK error, or None.

    Example:
        >>> err = HttpResponseError(message="gone")
        >>> error_code(err) is None
        True
    """
    odata = getattr(error, "error", None)
    code = getattr(odata, "code", None)
    if isinstance(code, str) and code:
        return code
    return None


def _status_code(error: Any) -> int | None:
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    return None


def is_not_found_error(error: BaseException) -> bool:
    """Check whether an error means the requested resource does not exist.

    Args:
        error: Exception raised by an SDK get call

    Returns:
        True only for a "not found" classification; throttling, auth and
        transport failures return False.

    Example:
        >>> is_not_found_error(ResourceNotFoundError("missing"))
        True
        >>> is_not_found_error(HttpResponseError(message="throttled"))
        False
    """
    if isinstance(error, ResourceNotFoundError):
        return True

    status = _status_code(error)
    if status == 404:
        return True

    code = error_code(error)
    if code is not None:
        return code.lower() in NOT_FOUND_ERROR_CODES

    if status is not None:
        return False

    normalized = str(error).lower()
    return "notfound" in normalized or "not found" in normalized
