"""Error types raised by the relay services.

Messages are deliberately generic: callers surface them to clients as-is, so
they never carry cipher details or raw upstream payloads. The underlying cause
stays available through exception chaining.
"""
from __future__ import annotations


class LinkDerivationError(ValueError):
    """Base class for failures turning an encrypted media token into links."""


class DecodeError(LinkDerivationError):
    """The token is not valid base64 or not aligned to the cipher block size."""


class DecryptError(LinkDerivationError):
    """The decrypted token has invalid padding or is not UTF-8 text."""


class UpstreamServiceError(RuntimeError):
    """An upstream call failed or returned a payload of an unexpected shape."""


class NotFoundError(UpstreamServiceError):
    """The upstream answered well-formed but without the requested item."""
