"""Custom exception hierarchy for amrcollect."""

from __future__ import annotations


class CollectError(Exception):
    """Base exception for all amrcollect errors."""


class CollectConfigError(CollectError):
    """Invalid or missing configuration."""


class DecodeError(CollectError):
    """Input line is not a well-formed rtlamr message."""


class UnknownTypeError(DecodeError):
    """Message discriminator names a family the collector does not handle."""

    def __init__(self, message: str, *, message_type: str = "") -> None:
        self.message_type = message_type
        super().__init__(message)


class ChecksumError(CollectError):
    """IDM serial number CRC did not produce the expected residue.

    The whole batch is rejected; no interval of it reaches the ring store.
    """

    def __init__(self, message: str, *, endpoint_id: int | None = None) -> None:
        self.endpoint_id = endpoint_id
        super().__init__(message)


class BootstrapError(CollectError):
    """Historical preload query failed.

    Never fatal: the collector logs it and starts with an empty registry.
    """


class WriteError(CollectError):
    """Writing points to the time-series store failed (network, non-2xx)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
