from __future__ import annotations


class PayrollError(Exception):
    """Base class for errors surfaced to API callers."""


class AuthError(PayrollError):
    """Raised when a mutation is attempted without an authenticated store."""


class UpstreamError(PayrollError):
    """Raised when the external store or OAuth provider fails or is misconfigured."""
