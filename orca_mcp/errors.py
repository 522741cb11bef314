"""
Custom exceptions for the Orca AI MCP server.
"""


class OrcaMcpError(RuntimeError):
    """Base exception for every failure surfaced to a tool caller."""


class ConfigurationAbsentError(OrcaMcpError):
    """Raised when a tool needs a configuration and none could be resolved."""


class ToolDisabledError(OrcaMcpError):
    """Raised when a tool is switched off by configuration."""


class UnknownToolError(OrcaMcpError):
    """Raised when the requested tool name is not recognized."""


class ArgumentValidationError(OrcaMcpError):
    """Raised when tool arguments do not match the declared input shape."""


class HuntApiError(OrcaMcpError):
    """Represents failures when communicating with the HUNT API."""


class AuthenticationFailureError(HuntApiError):
    """The API rejected the configured key (HTTP 401)."""


class BadRequestError(HuntApiError):
    """The API rejected the request parameters (HTTP 400)."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid request: {detail}")
        self.detail = detail


class RateLimitedError(HuntApiError):
    """The API throttled the caller (HTTP 429)."""


class UpstreamServerError(HuntApiError):
    """The API kept failing with a 5xx status after all retries."""


class NetworkError(HuntApiError):
    """No response was received (timeout, DNS, connection reset, ...)."""
