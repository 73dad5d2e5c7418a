"""Identity and issuance configuration dataclasses."""

import os
from dataclasses import dataclass

from cryptography import x509
from cryptography.x509 import oid


@dataclass(frozen=True)
class DatabaseIdentity:
    """Logical database target: organization, database and branch."""

    organization: str
    database: str
    branch: str

    def __post_init__(self) -> None:
        for field_name in ("organization", "database", "branch"):
            if not getattr(self, field_name):
                raise ValueError(f"{field_name} must not be empty")

    def server_name(self, remote_addr: str) -> str:
        """Return the server name used for SNI and peer identity checks.

        Args:
            remote_addr: Remote address advertised by the issuance service

        Returns:
            "branch.database.organization.remote_addr"
        """
        return f"{self.branch}.{self.database}.{self.organization}.{remote_addr}"

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for CSR generation."""
        return x509.Name(
            [
                x509.NameAttribute(
                    oid.NameOID.COMMON_NAME,
                    f"{self.organization}/{self.database}/{self.branch}",
                ),
            ]
        )


@dataclass
class IssuanceConfig:
    """Issuance API endpoint, service token and per-request defaults."""

    service_token_id: str = ""
    service_token: str = ""
    api_url: str = "https://api.planetscale.com"
    timeout: float = 30.0
    key_size: int = 2048
    protocol: str = "MySQL"

    @classmethod
    def from_env(cls) -> "IssuanceConfig":
        """Build configuration from PLANETSCALE_* environment variables.

        Raises:
            ValueError: If the service token variables are not set
        """
        token_id = os.environ.get("PLANETSCALE_SERVICE_TOKEN_ID", "")
        token = os.environ.get("PLANETSCALE_SERVICE_TOKEN", "")
        if not token_id or not token:
            raise ValueError(
                "PLANETSCALE_SERVICE_TOKEN_ID and PLANETSCALE_SERVICE_TOKEN must be set"
            )

        config = cls(service_token_id=token_id, service_token=token)
        if api_url := os.environ.get("PLANETSCALE_API_URL"):
            config.api_url = api_url.rstrip("/")
        if timeout := os.environ.get("PLANETSCALE_TIMEOUT"):
            config.timeout = float(timeout)
        return config
