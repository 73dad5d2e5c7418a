"""TLS bootstrap: issue an ephemeral client certificate and assemble dial parameters."""

from .bundle_parser import parse_bundle
from .cert_utils import (
    PrivateKey,
    build_csr,
    generate_private_key,
    get_certificate_serial_hex,
    public_key_der,
)
from .config import DatabaseIdentity
from .exceptions import PortNotAdvertisedError
from .issuance_client import CertificateIssuer
from .logging_config import LOGGER
from .models import DialParameters, IssuanceRequest, TLSConfig

DEFAULT_PROTOCOL = "MySQL"


def join_host_port(host: str, port: int) -> str:
    """Join host and port, bracketing IPv6 literals ("[::1]:3306")."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def build_issuance_request(identity: DatabaseIdentity, private_key: PrivateKey) -> IssuanceRequest:
    """Build an issuance request for identity from the public half of private_key."""
    return IssuanceRequest(
        organization=identity.organization,
        database=identity.database,
        branch=identity.branch,
        public_key=public_key_der(private_key),
        csr=build_csr(identity.to_x509_name(), private_key),
    )


def resolve_port(ports: dict[str, int], protocol: str) -> int:
    """Return the port advertised for protocol.

    Raises:
        PortNotAdvertisedError: If protocol has no port entry
    """
    try:
        return ports[protocol]
    except KeyError:
        raise PortNotAdvertisedError(protocol, sorted(ports)) from None


def bootstrap(
    identity: DatabaseIdentity,
    private_key: PrivateKey,
    issuer: CertificateIssuer,
    *,
    protocol: str = DEFAULT_PROTOCOL,
    timeout: float | None = None,
) -> DialParameters:
    """Issue a client certificate for identity and build dial parameters.

    One call is one full issuance cycle; nothing is cached or retained, so
    concurrent calls with independent identities and keys do not interact.
    Errors from issuance and parsing propagate unchanged and no partial
    configuration is returned.

    The TLS configuration trusts only the CA returned with this certificate
    and sets insecure_skip_verify: the remote address is ephemeral and
    load-balanced, so it has no publicly verifiable hostname. The
    connecting side must compare server_name with the server certificate
    (TLSConfig.verify_peer_certificate). Do not swap this for standard
    hostname verification; it cannot succeed against these endpoints.

    Args:
        identity: Organization, database and branch to connect to
        private_key: Key the client certificate is issued for
        issuer: Issuance client
        protocol: Port mapping key of the wire protocol to dial
        timeout: Issuance deadline in seconds

    Returns:
        DialParameters with "host:port" address and TLSConfig

    Raises:
        IssuanceError: If issuance fails or is cancelled
        MalformedCredentialError: If a returned certificate cannot be parsed
        KeyCertificateMismatchError: If the certificate was not issued for private_key
        PortNotAdvertisedError: If the bundle has no port for protocol
    """
    request = build_issuance_request(identity, private_key)

    LOGGER.info(
        "Requesting certificate for %s/%s/%s",
        identity.organization,
        identity.database,
        identity.branch,
    )
    bundle = issuer.create(request, timeout=timeout)

    client, root_cas = parse_bundle(bundle, private_key)
    server_name = identity.server_name(bundle.remote_addr)
    port = resolve_port(bundle.ports, protocol)
    address = join_host_port(bundle.remote_addr, port)

    tls_config = TLSConfig(
        root_cas=root_cas,
        certificates=[client],
        server_name=server_name,
        insecure_skip_verify=True,
    )

    LOGGER.info(
        "Certificate %s issued, dialing %s as %s",
        get_certificate_serial_hex(client.certificate),
        address,
        server_name,
    )
    return DialParameters(address=address, tls_config=tls_config)


def bootstrap_with_new_key(
    identity: DatabaseIdentity,
    issuer: CertificateIssuer,
    *,
    key_size: int = 2048,
    protocol: str = DEFAULT_PROTOCOL,
    timeout: float | None = None,
) -> DialParameters:
    """Generate a fresh RSA key and bootstrap with it.

    Renewing a certificate means calling this again.
    """
    private_key = generate_private_key(key_size)
    return bootstrap(identity, private_key, issuer, protocol=protocol, timeout=timeout)
