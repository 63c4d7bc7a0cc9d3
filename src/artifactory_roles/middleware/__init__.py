"""Middleware package."""

from artifactory_roles.middleware.error_handler import (
    generic_exception_handler,
    http_exception_handler,
    role_api_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "generic_exception_handler",
    "http_exception_handler",
    "role_api_exception_handler",
    "sqlalchemy_exception_handler",
    "validation_exception_handler",
]
