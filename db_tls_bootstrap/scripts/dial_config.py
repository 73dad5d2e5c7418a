#!/usr/bin/env python3
"""Issue an ephemeral client certificate and print dial parameters."""

import argparse
import sys

from botocore.exceptions import BotoCoreError, ClientError

from db_tls_bootstrap.lib.bootstrap import bootstrap_with_new_key
from db_tls_bootstrap.lib.config import DatabaseIdentity, IssuanceConfig
from db_tls_bootstrap.lib.exceptions import BootstrapError
from db_tls_bootstrap.lib.issuance_client import HTTPCertificateIssuer
from db_tls_bootstrap.lib.logging_config import LOGGER, set_verbose
from db_tls_bootstrap.lib.ssm_client import SSMClient


def load_config(args: argparse.Namespace) -> IssuanceConfig:
    """Load issuance config from SSM when --ssm-account is given, else from env."""
    if args.ssm_account is None:
        return IssuanceConfig.from_env()

    token_id, token = SSMClient(region=args.region).get_service_token(
        project_name=args.project_name, account=args.ssm_account
    )
    return IssuanceConfig(service_token_id=token_id, service_token=token)


def main(argv: list[str] | None = None) -> int:
    """Bootstrap TLS for a database branch.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Print dial parameters for a database branch")
    parser.add_argument("--org", required=True, help="Organization name")
    parser.add_argument("--database", required=True, help="Database name")
    parser.add_argument("--branch", required=True, help="Branch name")
    parser.add_argument(
        "--ssm-account",
        help="Read the service token from SSM for this account instead of the environment",
    )
    parser.add_argument("--project-name", default="db-tls", help="SSM path prefix (default: db-tls)")
    parser.add_argument("--region", default="eu-west-2", help="AWS region for SSM (default: eu-west-2)")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        config = load_config(args)
        identity = DatabaseIdentity(
            organization=args.org, database=args.database, branch=args.branch
        )
        result = bootstrap_with_new_key(
            identity,
            HTTPCertificateIssuer(config),
            key_size=config.key_size,
            protocol=config.protocol,
            timeout=config.timeout,
        )

        LOGGER.info("Dial parameters:")
        LOGGER.info("  Address: %s", result.address)
        LOGGER.info("  Server name: %s", result.tls_config.server_name)
        return 0

    except BootstrapError as e:
        LOGGER.error("TLS bootstrap failed: %s", e)
        return 1
    except ValueError as e:
        LOGGER.error("Invalid configuration: %s", e)
        return 1
    except (ClientError, BotoCoreError) as e:
        LOGGER.error("Failed to read service token from SSM: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
