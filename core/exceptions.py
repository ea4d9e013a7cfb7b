"""
CraftHub Custom Exceptions

This module provides the exception classes raised by the service layer of the
CraftHub backend. Views translate them into HTTP responses; services never
build responses themselves.

Hierarchy:
- CraftHubException: base class with message, status code, error code, details
  - ValidationFailed: input rejected before any remote call was made
  - RemoteServiceError: a managed collaborator (image host, payment gateway,
    identity provider) failed or rejected the call
    - ImageUploadError
    - PaymentGatewayError
    - SocialAuthError

Author: CraftHub Development Team
Version: 1.0.0
"""

from typing import Optional, Dict, Any


class CraftHubException(Exception):
    """
    Base exception class for all CraftHub service errors.

    Attributes:
        message (str): Human-readable error message
        status_code (Optional[int]): HTTP status code the view should answer with
        error_code (Optional[str]): Machine-readable error identifier
        details (Optional[Dict[str, Any]]): Additional error details

    Example:
        >>> try:
        ...     place_order(user, shipping_info)
        ... except CraftHubException as e:
        ...     return Response(e.to_dict(), status=e.status_code)
    """

    default_status_code = 400
    default_error_code = "error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a response payload.

        Returns:
            Dictionary with a ``detail`` message plus error code and details
        """
        payload: Dict[str, Any] = {
            "detail": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(CraftHubException):
    """
    Raised when user input is rejected before any remote call is made.

    Examples: missing checkout fields, wrong product image count, malformed
    course video URL, rating outside 1..5.
    """

    default_status_code = 400
    default_error_code = "validation_failed"


class RemoteServiceError(CraftHubException):
    """
    Raised when a managed collaborator fails.

    Attributes:
        service (str): Name of the failing collaborator
    """

    default_status_code = 502
    default_error_code = "remote_service_error"

    def __init__(
        self,
        message: str,
        service: str = "remote",
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service = service
        super().__init__(message, status_code, error_code, details)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["service"] = self.service
        return payload


class ImageUploadError(RemoteServiceError):
    """Raised when the image host rejects or fails an upload."""

    default_error_code = "image_upload_failed"

    def __init__(self, message: str = "Failed to upload image", **kwargs) -> None:
        super().__init__(message, service="image_host", **kwargs)


class PaymentGatewayError(RemoteServiceError):
    """Raised when the payment gateway call fails or a payment cannot be verified."""

    default_error_code = "payment_gateway_error"

    def __init__(self, message: str = "Payment could not be processed", **kwargs) -> None:
        super().__init__(message, service="payment_gateway", **kwargs)


class SocialAuthError(RemoteServiceError):
    """Raised when a social identity token cannot be verified."""

    default_status_code = 401
    default_error_code = "social_auth_failed"

    def __init__(self, message: str = "Social sign-in failed", **kwargs) -> None:
        super().__init__(message, service="identity_provider", **kwargs)
