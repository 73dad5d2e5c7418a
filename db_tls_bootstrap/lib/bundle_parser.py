"""Decode PEM certificate bundles into objects usable for a TLS configuration."""

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm

from .cert_utils import (
    PrivateKey,
    deserialize_certificate,
    deserialize_private_key,
    public_keys_match,
)
from .exceptions import KeyCertificateMismatchError, MalformedCredentialError
from .models import CertificateBundle, ClientCertificate

PRIVATE_KEY = "private key"
CLIENT_CERTIFICATE = "client certificate"
CA_CERTIFICATE = "CA certificate"


def _parse_certificate(pem_data: bytes, artifact: str) -> x509.Certificate:
    if not pem_data:
        raise MalformedCredentialError(artifact, "empty PEM data")
    try:
        return deserialize_certificate(pem_data)
    except ValueError as e:
        raise MalformedCredentialError(artifact, str(e)) from e


def parse_private_key(pem_data: bytes) -> PrivateKey:
    """Parse an unencrypted RSA or EC private key.

    Raises:
        MalformedCredentialError: If the PEM block or key cannot be decoded
    """
    if not pem_data:
        raise MalformedCredentialError(PRIVATE_KEY, "empty PEM data")
    try:
        return deserialize_private_key(pem_data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise MalformedCredentialError(PRIVATE_KEY, str(e)) from e


def parse_client_certificate(pem_data: bytes) -> x509.Certificate:
    """Parse the issued client certificate."""
    return _parse_certificate(pem_data, CLIENT_CERTIFICATE)


def parse_ca_certificate(pem_data: bytes) -> x509.Certificate:
    """Parse the CA certificate that signed the client certificate."""
    return _parse_certificate(pem_data, CA_CERTIFICATE)


def pair_key_and_certificate(private_key: PrivateKey, certificate: x509.Certificate) -> ClientCertificate:
    """Pair private_key with certificate into a client chain entry.

    Raises:
        KeyCertificateMismatchError: If certificate does not embed the
            public half of private_key
    """
    if not public_keys_match(private_key, certificate):
        raise KeyCertificateMismatchError(
            f"private key does not match client certificate {certificate.subject.rfc4514_string()!r}"
        )
    return ClientCertificate(certificate=certificate, private_key=private_key)


def build_root_pool(ca_certificate: x509.Certificate) -> list[x509.Certificate]:
    """Return a trust root set holding exactly one CA.

    Only the single issued CA is trusted per bootstrap call; no further
    chain is evaluated.
    """
    return [ca_certificate]


def parse_bundle(
    bundle: CertificateBundle, private_key: PrivateKey
) -> tuple[ClientCertificate, list[x509.Certificate]]:
    """Parse and pair the certificates of an issuance bundle.

    Args:
        bundle: Bundle returned by the issuance service
        private_key: Key the certificate was requested for

    Returns:
        Tuple of (client chain entry, trust root set)

    Raises:
        MalformedCredentialError: If either certificate cannot be parsed
        KeyCertificateMismatchError: If the key does not match the client certificate
    """
    client_cert = parse_client_certificate(bundle.client_certificate)
    ca_cert = parse_ca_certificate(bundle.ca_certificate)
    client = pair_key_and_certificate(private_key, client_cert)
    return client, build_root_pool(ca_cert)
