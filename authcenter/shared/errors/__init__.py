from .base import (
    AppError,
    DomainError,
    InfrastructureError,
    RandomSourceError,
    StoreError,
    ValidationError,
    operation_context,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "RandomSourceError",
    "StoreError",
    "ValidationError",
    "handle_app_error",
    "operation_context",
    "register_error_handler",
]
