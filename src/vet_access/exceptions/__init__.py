"""
Custom exceptions for the vet-access package.

This module defines the exception hierarchy and custom exceptions
used throughout the record-sharing platform.
"""

from .core_exceptions import (
    AccessControlException,
    AccessDeniedException,
    BusinessRuleException,
    ConfigurationException,
    ConnectionException,
    DatabaseException,
    ForbiddenException,
    GrantAlreadyRevokedException,
    GrantConflictException,
    GrantNotFoundException,
    InvalidRoleException,
    MedicalRecordNotFoundException,
    NotFoundException,
    PetNotFoundException,
    PrincipalNotFoundException,
    ProfileIncompleteException,
    SchemaValidationException,
    TransactionException,
    ValidationException,
    VetAccessException,
    create_error_response,
    format_validation_errors,
    log_exception_context,
)

__all__ = [
    # Exception classes
    "VetAccessException",
    "DatabaseException",
    "ConnectionException",
    "TransactionException",
    "ValidationException",
    "SchemaValidationException",
    "BusinessRuleException",
    "ConfigurationException",
    "AccessControlException",
    "NotFoundException",
    "PetNotFoundException",
    "GrantNotFoundException",
    "PrincipalNotFoundException",
    "MedicalRecordNotFoundException",
    "InvalidRoleException",
    "ForbiddenException",
    "AccessDeniedException",
    "ProfileIncompleteException",
    "GrantConflictException",
    "GrantAlreadyRevokedException",
    # Utility functions
    "format_validation_errors",
    "create_error_response",
    "log_exception_context",
]
