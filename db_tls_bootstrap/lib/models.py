"""Request, bundle and result models for TLS bootstrap."""

from dataclasses import dataclass

from cryptography import x509

from .cert_utils import (
    PrivateKey,
    get_common_name,
    get_dns_names,
    is_directly_issued_by,
    serialize_certificate,
    serialize_private_key,
)
from .exceptions import PeerVerificationError


@dataclass(frozen=True)
class IssuanceRequest:
    """Request sent to the issuance service.

    public_key is the DER SubjectPublicKeyInfo of the caller's key and csr
    a PEM CSR signed by that key.
    """

    organization: str
    database: str
    branch: str
    public_key: bytes
    csr: bytes


@dataclass
class CertificateBundle:
    """Artifacts returned by one issuance call.

    Contains PEM client and CA certificates, the remote address and the
    protocol name to port mapping.
    """

    client_certificate: bytes
    ca_certificate: bytes
    remote_addr: str
    ports: dict[str, int]


@dataclass
class ClientCertificate:
    """Client certificate paired with its private key."""

    certificate: x509.Certificate
    private_key: PrivateKey

    def certificate_pem(self) -> bytes:
        return serialize_certificate(self.certificate)

    def private_key_pem(self) -> bytes:
        return serialize_private_key(self.private_key)


@dataclass
class TLSConfig:
    """Client-side TLS configuration.

    insecure_skip_verify disables verification of the server chain against
    the standard trust store. It is only safe when root_cas holds a CA issued
    for this call and the connecting side compares server_name with the
    server certificate (see verify_peer_certificate).

    Key material stays in memory as cryptography objects. Nothing here
    serializes the private key to a file.
    """

    root_cas: list[x509.Certificate]
    certificates: list[ClientCertificate]
    server_name: str
    insecure_skip_verify: bool = False

    def verify_peer_certificate(self, peer: x509.Certificate | bytes) -> None:
        """Check a server certificate against root_cas and server_name.

        Args:
            peer: Server certificate, or its DER encoding as returned by
                ssl.SSLSocket.getpeercert(binary_form=True)

        Raises:
            PeerVerificationError: If the certificate is not issued by a
                trusted root, has an unreadable subject or does not name server_name
        """
        if isinstance(peer, bytes):
            try:
                peer = x509.load_der_x509_certificate(peer)
            except ValueError as e:
                raise PeerVerificationError(f"invalid server certificate: {e}") from e

        if not any(is_directly_issued_by(peer, root) for root in self.root_cas):
            raise PeerVerificationError("server certificate is not issued by a trusted CA")

        names = get_dns_names(peer)
        try:
            common_name = get_common_name(peer)
        except ValueError as e:
            raise PeerVerificationError(f"invalid server certificate subject: {e}") from e
        if common_name is not None:
            names.append(common_name)
        if self.server_name not in names:
            raise PeerVerificationError(
                f"server certificate does not match {self.server_name!r} (got {', '.join(names) or 'no names'})"
            )


@dataclass
class DialParameters:
    """Address and TLS configuration for one connection attempt."""

    address: str
    tls_config: TLSConfig
