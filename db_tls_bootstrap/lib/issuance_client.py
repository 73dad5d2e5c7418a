"""Certificate issuance clients."""

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Protocol

from .config import IssuanceConfig
from .exceptions import IssuanceCancelledError, IssuanceError
from .logging_config import LOGGER
from .models import CertificateBundle, IssuanceRequest

# Port names used on the wire, mapped to protocol keys
WIRE_PORT_NAMES = {
    "mysql-tls": "MySQL",
    "proxy": "Proxy",
}


class CertificateIssuer(Protocol):
    """Exchanges an identity and public key for a signed certificate bundle."""

    def create(self, request: IssuanceRequest, timeout: float | None = None) -> CertificateBundle:
        """Issue a certificate for request.

        Implementations must give up once timeout seconds have passed and
        raise IssuanceCancelledError. Any other failure is an IssuanceError.
        """
        ...


class HTTPCertificateIssuer:
    """Issuance client for the PlanetScale HTTP API (no retries)."""

    def __init__(self, config: IssuanceConfig) -> None:
        """Initialize HTTP issuer.

        Args:
            config: Issuance configuration with API URL, service token and timeout
        """
        self.config = config

    def create(self, request: IssuanceRequest, timeout: float | None = None) -> CertificateBundle:
        """POST a CSR to the create-certificate endpoint.

        Args:
            request: Issuance request carrying the identity and CSR
            timeout: Deadline in seconds, defaults to config.timeout

        Returns:
            CertificateBundle with PEM certificates, remote address and ports

        Raises:
            IssuanceCancelledError: If the deadline expires
            IssuanceError: On HTTP, transport or response format errors
        """
        url = self.certificate_url(request)
        data = json.dumps({"csr": request.csr.decode("ascii")}).encode("utf-8")
        headers = {
            "Authorization": f"{self.config.service_token_id}:{self.config.service_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        deadline = self.config.timeout if timeout is None else timeout

        try:
            req = urllib.request.Request(url, data=data, headers=headers, method="POST")
        except ValueError as e:
            raise IssuanceError(f"invalid issuance API URL {self.config.api_url!r}: {e}") from e

        LOGGER.debug("Requesting certificate from %s", url)
        try:
            with urllib.request.urlopen(req, timeout=deadline) as response:
                body = response.read()
        except urllib.error.HTTPError as e:
            raise IssuanceError(_http_error_message(e), status_code=e.code) from e
        except TimeoutError as e:
            raise IssuanceCancelledError(f"certificate issuance timed out after {deadline}s") from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise IssuanceCancelledError(f"certificate issuance timed out after {deadline}s") from e
            raise IssuanceError(f"certificate issuance failed: {e.reason}") from e
        except OSError as e:
            raise IssuanceError(f"certificate issuance failed: {e}") from e

        try:
            payload = json.loads(body.decode("utf-8"))
        except ValueError as e:
            raise IssuanceError("certificate issuance returned invalid JSON") from e

        return parse_certificate_response(payload)

    def certificate_url(self, request: IssuanceRequest) -> str:
        """Return the create-certificate endpoint for the request's identity."""
        org, db, branch = (
            urllib.parse.quote(part, safe="")
            for part in (request.organization, request.database, request.branch)
        )
        return (
            f"{self.config.api_url.rstrip('/')}/v1/organizations/{org}"
            f"/databases/{db}/branches/{branch}/create-certificate"
        )


def parse_certificate_response(payload: Any) -> CertificateBundle:
    """Convert a create-certificate JSON response into a CertificateBundle.

    Raises:
        IssuanceError: If required fields are missing or have the wrong type
    """
    try:
        ports = {
            WIRE_PORT_NAMES.get(name, name): int(port)
            for name, port in payload["ports"].items()
        }
        bundle = CertificateBundle(
            client_certificate=payload["certificate"].encode("ascii"),
            ca_certificate=payload["certificate_chain"].encode("ascii"),
            remote_addr=payload["remote_addr"],
            ports=ports,
        )
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise IssuanceError(f"unexpected certificate response: {e!r}") from e

    if not isinstance(bundle.remote_addr, str) or not bundle.remote_addr:
        raise IssuanceError("unexpected certificate response: empty remote_addr")
    return bundle


def _http_error_message(error: urllib.error.HTTPError) -> str:
    """Build a message from an API error, using its JSON body when present."""
    message = f"certificate issuance failed with HTTP {error.code}"
    try:
        body = json.loads(error.read().decode("utf-8"))
    except (ValueError, OSError):
        return message
    if isinstance(body, dict) and body.get("message"):
        code = body.get("code")
        message += f": {body['message']}" + (f" ({code})" if code else "")
    return message
