"""
Error taxonomy for openclaw-vps deployments.

Every error aborts the run. None of them are recovered locally: they carry
enough context (which key, which file, which placeholder, which resource)
for an operator to diagnose the failure without re-running with tracing.
"""

from typing import Iterable


class OpenClawError(Exception):
    """Base class for all deployment errors."""
    pass


class MissingConfigurationError(OpenClawError):
    """Raised when a required configuration key or secret is not set."""

    def __init__(self, key: str, namespace: str | None = None, secret: bool = False):
        self.key = key
        self.namespace = namespace
        self.secret = secret
        qualified = f"{namespace}:{key}" if namespace else key
        flag = "--secret " if secret else ""
        super().__init__(
            f"Missing required configuration '{qualified}'. "
            f"Set it with: pulumi config set {flag}{key} <value>"
        )


class ExternalLookupEmptyError(OpenClawError):
    """Raised when a read-only lookup (machine image, zones) finds nothing."""

    def __init__(self, lookup: str, query: str):
        self.lookup = lookup
        self.query = query
        super().__init__(f"No {lookup} found matching {query}")


class TemplateFileReadError(OpenClawError):
    """Raised when a template file is missing, unreadable or malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read template file '{path}': {reason}")


class UnresolvedPlaceholderError(OpenClawError):
    """Raised when a template references placeholders with no binding."""

    def __init__(self, placeholders: Iterable[str]):
        self.placeholders = tuple(sorted(set(placeholders)))
        names = ", ".join(self.placeholders)
        super().__init__(f"Unresolved template placeholder(s): {names}")


class ResourceDeclarationRejectedError(OpenClawError):
    """Raised when a resource declaration is invalid or rejected by Pulumi."""

    def __init__(self, kind: str, name: str, reason: str):
        self.kind = kind
        self.name = name
        self.reason = reason
        super().__init__(f"Declaration of {kind} '{name}' rejected: {reason}")


class UnusedBindingWarning(UserWarning):
    """Emitted when a template binding is supplied but never referenced."""
    pass
