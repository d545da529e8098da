"""Error taxonomy for the chat gateway.

Errors raised before the event stream opens carry an HTTP status and are
rendered as ordinary JSON responses. Errors raised by upstream adapters
after the stream opens are reported in-band as a single ``error`` event.
"""


class GatewayError(Exception):
    """Base class for all gateway errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(GatewayError):
    """Credential missing, malformed, or rejected by the identity service."""

    status_code = 401


class MisconfiguredService(GatewayError):
    """A required server-side setting is absent."""

    status_code = 500


class MalformedRequest(GatewayError):
    """Request body could not be parsed."""

    status_code = 400


class UpstreamFailure(GatewayError):
    """Base class for failures of an upstream inference backend."""

    status_code = 502


class MissingCredential(UpstreamFailure):
    """Hosted backend selected but no API key is configured."""


class UpstreamError(UpstreamFailure):
    """Upstream rejected the initial call or the connection failed.

    Attributes:
        status: HTTP status returned by the upstream, or 0 when no response
            was received (connect failure, timeout)
        body: Response body text, possibly empty
    """

    def __init__(self, message: str, status: int = 0, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body
