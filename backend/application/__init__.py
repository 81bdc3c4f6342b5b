"""Application services."""

from .auth import AuthProvider, DemoAuthProvider, GoogleAuthProvider
from .broadcast import Broadcaster
from .payroll import PayrollService, result_payload

__all__ = [
    "AuthProvider",
    "Broadcaster",
    "DemoAuthProvider",
    "GoogleAuthProvider",
    "PayrollService",
    "result_payload",
]
