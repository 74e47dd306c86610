"""
Core exceptions for the vet-access package.

This module defines the exception hierarchy used throughout the record-sharing
platform. Every exception carries an ``http_status`` so that the surrounding
HTTP layer can map failures without inspecting exception types.
"""

import logging
import time
import traceback
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, urlunparse


class VetAccessException(Exception):
    """
    Base exception class for all vet-access package exceptions.

    Provides a consistent interface for error handling across the package.
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status,
            "timestamp": time.time(),
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """
        Get detailed debug information for the exception.

        Returns:
            Dictionary with debug information including traceback
        """
        debug_info = self.to_dict()
        formatted = traceback.format_exc()
        debug_info.update(
            {
                "traceback": (
                    formatted if formatted.strip() != "NoneType: None" else None
                ),
                "module": self.__class__.__module__,
                "class_name": self.__class__.__name__,
            }
        )
        return debug_info

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """
        Log the exception with appropriate level and context.

        Args:
            logger: Logger instance to use (creates default if None)
            level: Logging level to use
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        log_data = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": log_data},
        )

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DatabaseException(VetAccessException):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize database exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
            original_error: Original exception that caused this error
        """
        super().__init__(message, error_code, details)
        self.original_error = original_error

        if original_error and "original_error" not in self.details:
            self.details["original_error"] = str(original_error)


class ConnectionException(DatabaseException):
    """Exception raised when database connection fails."""

    http_status = 503

    def __init__(
        self,
        message: str = "Database connection failed",
        database_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize connection exception.

        Args:
            message: Error message
            database_url: Database URL (will be sanitized)
            original_error: Original exception
        """
        details = {}
        if database_url:
            details["database_url"] = self._sanitize_url(database_url)

        super().__init__(
            message=message,
            error_code="DATABASE_CONNECTION_ERROR",
            details=details,
            original_error=original_error,
        )

    @staticmethod
    def _sanitize_url(url: str) -> str:
        """Remove credentials from database URL for logging."""
        try:
            parsed = urlparse(url)
            sanitized = parsed._replace(netloc=f"{parsed.hostname}:{parsed.port}")
            return urlunparse(sanitized)
        except (ValueError, AttributeError) as e:
            return f"[URL_PARSE_ERROR: {e}]"


class TransactionException(DatabaseException):
    """Exception raised when database transaction fails."""

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize transaction exception.

        Args:
            message: Error message
            operation: Description of the failed operation
            original_error: Original exception
        """
        details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code="DATABASE_TRANSACTION_ERROR",
            details=details,
            original_error=original_error,
        )


class ValidationException(VetAccessException):
    """Base exception for data validation errors."""

    http_status = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: Field that failed validation
            value: Value that failed validation
            validation_errors: Detailed validation errors
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class SchemaValidationException(ValidationException):
    """Exception raised when Pydantic schema validation fails."""

    def __init__(
        self,
        message: str = "Schema validation failed",
        schema_name: Optional[str] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize schema validation exception.

        Args:
            message: Error message
            schema_name: Name of the schema that failed validation
            validation_errors: Pydantic validation errors
        """
        super().__init__(
            message=message,
            validation_errors=validation_errors,
        )
        self.error_code = "SCHEMA_VALIDATION_ERROR"
        if schema_name:
            self.details["schema_name"] = schema_name


class BusinessRuleException(ValidationException):
    """Exception raised when business rule validation fails."""

    def __init__(
        self,
        message: str = "Business rule validation failed",
        rule_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize business rule exception.

        Args:
            message: Error message
            rule_name: Name of the business rule that failed
            context: Additional context about the failure
        """
        super().__init__(message=message)
        self.error_code = "BUSINESS_RULE_ERROR"
        if rule_name:
            self.details["rule_name"] = rule_name
        if context:
            self.details["context"] = context


class ConfigurationException(VetAccessException):
    """Exception raised for invalid configuration."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        """
        Initialize configuration exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            config_value: Configuration value (will be sanitized)
        """
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = self._sanitize_config_value(
                config_key, config_value
            )

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )

    @staticmethod
    def _sanitize_config_value(key: Optional[str], value: str) -> str:
        """Sanitize configuration values to avoid exposing secrets."""
        if not key:
            return "[REDACTED]"

        sensitive_keys = ["password", "secret", "key", "token", "credential"]
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            return "[REDACTED]"

        return value


# Access-control exceptions


class AccessControlException(VetAccessException):
    """Base exception for grant store and authorization failures."""


class NotFoundException(AccessControlException):
    """Raised when a pet, grant, principal or record does not exist."""

    http_status = 404
    resource_type = "resource"

    def __init__(
        self,
        message: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        details = {"resource_type": self.resource_type}
        if resource_id is not None:
            details["resource_id"] = str(resource_id)

        super().__init__(
            message=message or f"{self.resource_type.replace('_', ' ').capitalize()} not found",
            error_code="NOT_FOUND",
            details=details,
        )
        self.resource_id = resource_id


class PetNotFoundException(NotFoundException):
    """Raised when a pet does not exist or has been deleted."""

    resource_type = "pet"


class GrantNotFoundException(NotFoundException):
    """Raised when an access grant does not exist."""

    resource_type = "access_grant"


class PrincipalNotFoundException(NotFoundException):
    """Raised when a user account does not exist."""

    resource_type = "user"


class MedicalRecordNotFoundException(NotFoundException):
    """Raised when a medical record does not exist or has been deleted."""

    resource_type = "medical_record"


class InvalidRoleException(AccessControlException):
    """Raised when the target of a grant is not a veterinarian."""

    http_status = 400

    def __init__(
        self,
        message: str = "User is not a veterinarian",
        user_id: Optional[Any] = None,
        role: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if user_id is not None:
            details["user_id"] = str(user_id)
        if role:
            details["role"] = role

        super().__init__(message=message, error_code="INVALID_ROLE", details=details)


class ForbiddenException(AccessControlException):
    """Raised when the actor lacks standing to perform an operation."""

    http_status = 403

    def __init__(
        self,
        message: str = "You are not allowed to perform this operation",
        error_code: str = "FORBIDDEN",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class AccessDeniedException(ForbiddenException):
    """
    Raised by resource services when an authorization decision is a denial.

    The message is deliberately generic: the denial reason is logged but never
    placed in the exception details returned to callers.
    """

    def __init__(self, message: str = "Not authorized to access this pet"):
        super().__init__(message=message, error_code="ACCESS_DENIED")


class ProfileIncompleteException(ForbiddenException):
    """Raised when a user must complete their profile before acting."""

    def __init__(
        self,
        message: str = "Please complete your profile before continuing",
        missing_fields: Optional[List[str]] = None,
    ):
        details: Dict[str, Any] = {"profile_incomplete": True}
        if missing_fields:
            details["missing_fields"] = missing_fields
        super().__init__(
            message=message, error_code="PROFILE_INCOMPLETE", details=details
        )


class GrantConflictException(AccessControlException):
    """Raised when an active grant already exists for a pet/veterinarian pair."""

    http_status = 409

    def __init__(
        self,
        message: str = "Access already granted to this veterinarian",
        pet_id: Optional[Any] = None,
        veterinarian_id: Optional[Any] = None,
    ):
        details = {}
        if pet_id is not None:
            details["pet_id"] = str(pet_id)
        if veterinarian_id is not None:
            details["veterinarian_id"] = str(veterinarian_id)

        super().__init__(message=message, error_code="GRANT_CONFLICT", details=details)


class GrantAlreadyRevokedException(AccessControlException):
    """Raised when revoking a grant that is no longer active."""

    http_status = 409

    def __init__(
        self,
        message: str = "Access has already been revoked",
        grant_id: Optional[Any] = None,
    ):
        details = {}
        if grant_id is not None:
            details["grant_id"] = str(grant_id)

        super().__init__(
            message=message, error_code="GRANT_ALREADY_REVOKED", details=details
        )


# Utility functions for exception handling and error formatting


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Format Pydantic validation errors into a user-friendly structure.

    Args:
        errors: List of Pydantic validation errors

    Returns:
        Dictionary mapping field names to lists of error messages
    """
    formatted_errors: Dict[str, List[str]] = {}

    for error in errors:
        field_path = ".".join(str(loc) for loc in error.get("loc", []))
        if not field_path:
            field_path = "root"

        message = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        if error_type == "value_error":
            formatted_message = message
        elif error_type == "missing":
            formatted_message = "This field is required"
        elif error_type == "extra_forbidden":
            formatted_message = "Unknown field"
        else:
            formatted_message = f"{message} (type: {error_type})"

        formatted_errors.setdefault(field_path, []).append(formatted_message)

    return formatted_errors


def create_error_response(
    exception: VetAccessException,
    include_debug: bool = False,
) -> Dict[str, Any]:
    """
    Create a standardized error response from an exception.

    Args:
        exception: The exception to format
        include_debug: Whether to include debug information

    Returns:
        Standardized error response dictionary, including the HTTP status
    """
    response: Dict[str, Any] = {
        "success": False,
        "status": exception.http_status,
        "error": {
            "type": exception.__class__.__name__,
            "code": exception.error_code,
            "message": exception.message,
        },
    }

    if exception.details:
        response["error"]["details"] = exception.details

    if include_debug:
        debug_info = exception.get_debug_info()
        response["debug"] = {
            "timestamp": debug_info["timestamp"],
            "module": debug_info["module"],
            "class_name": debug_info["class_name"],
        }

    return response


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with additional context information.

    Args:
        exception: The exception to log
        context: Additional context information
        logger: Logger instance to use
        level: Logging level
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(exception, VetAccessException):
        log_data = exception.to_dict()
        log_data["context"] = context
        logger.log(
            level,
            f"Exception with context: {exception.message}",
            extra={"exception_data": log_data},
        )
    else:
        logger.log(
            level,
            f"Non-VetAccess exception: {str(exception)}",
            extra={
                "exception_type": exception.__class__.__name__,
                "exception_message": str(exception),
                "context": context,
            },
        )
