# core/errors.py

from typing import Optional


class NotFoundError(Exception):
    """
    Resource (or its ownership chain) does not resolve.
    Cross-object references land here too, so callers outside an
    object's scope never learn whether the resource exists.
    """

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")


class AccessDenied(Exception):
    """Decision engine returned Deny; `reason` is the machine-readable code."""

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail or "Access denied"
        super().__init__(f"{self.detail} ({reason})")


class StoreUnavailable(Exception):
    """
    Persistence (Supabase) or blob (S3) boundary failure.
    Never interpreted as Allow or Deny; always surfaces as a 500.
    """

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: {detail}" if detail else operation)


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: Supabase errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or error.__class__.__name__
