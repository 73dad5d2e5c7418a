"""Exception hierarchy for TLS bootstrap operations.

All errors inherit from BootstrapError so callers can catch a single type.
None of them are recovered inside this package.
"""


class BootstrapError(Exception):
    """Base exception for all bootstrap errors."""


class IssuanceError(BootstrapError):
    """The issuance service failed to return a certificate bundle."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IssuanceCancelledError(IssuanceError):
    """Issuance was aborted because the call deadline expired."""


class MalformedCredentialError(BootstrapError, ValueError):
    """A PEM artifact could not be decoded or parsed."""

    def __init__(self, artifact: str, reason: str) -> None:
        super().__init__(f"malformed {artifact}: {reason}")
        self.artifact = artifact
        self.reason = reason


class KeyCertificateMismatchError(BootstrapError):
    """The private key does not match the issued client certificate."""


class PortNotAdvertisedError(BootstrapError):
    """The bundle does not advertise a port for the requested protocol."""

    def __init__(self, protocol: str, advertised: list[str]) -> None:
        super().__init__(
            f"no port advertised for protocol {protocol!r} "
            f"(advertised: {', '.join(advertised) or 'none'})"
        )
        self.protocol = protocol
        self.advertised = advertised


class PeerVerificationError(BootstrapError):
    """A server certificate failed the CA or server name check."""


__all__ = [
    "BootstrapError",
    "IssuanceError",
    "IssuanceCancelledError",
    "MalformedCredentialError",
    "KeyCertificateMismatchError",
    "PortNotAdvertisedError",
    "PeerVerificationError",
]
