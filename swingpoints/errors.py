"""Error taxonomy shared by the provider, retry and service layers."""
from __future__ import annotations


class SwingPointsError(Exception):
    """Base class for all service errors."""


class ClientInputError(SwingPointsError):
    """Request is missing a required field or carries an invalid value."""


class MissingCredentialError(SwingPointsError):
    """No upstream access token is configured. Aborts the whole request."""


class UpstreamFailure(SwingPointsError):
    """The upstream provider did not return usable candles."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"Upstream error ({status_code}): {detail}" if status_code else f"Upstream error: {detail}")
        self.detail = detail
        self.status_code = status_code


class RangeTooWideError(UpstreamFailure):
    """HTTP 400 "Invalid date range". Retried by shrinking the range."""


class RetriesExhaustedError(UpstreamFailure):
    """Range shrinking ran out of attempts."""


class MalformedResponseError(UpstreamFailure):
    """Upstream answered but the payload does not match the candle contract."""
