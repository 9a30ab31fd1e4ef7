"""Utilities Package"""
from nss_hours.utils.error_handler import handle_db_exception, register_exception_handlers
from nss_hours.utils.error_decorators import handle_store_errors
from nss_hours.utils.validators import Validators

__all__ = [
    "handle_db_exception",
    "register_exception_handlers",
    "handle_store_errors",
    "Validators",
]
