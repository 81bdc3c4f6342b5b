"""Infrastructure layer exports."""

from .google_oauth import GoogleOAuthClient, OAuthError, OAuthToken
from .payroll_store import InMemoryPayrollStore, PayrollStore, SheetsPayrollStore
from .sheets import GoogleSheetsClient, SheetsError

__all__ = [
    "GoogleOAuthClient",
    "GoogleSheetsClient",
    "InMemoryPayrollStore",
    "OAuthError",
    "OAuthToken",
    "PayrollStore",
    "SheetsError",
    "SheetsPayrollStore",
]
