"""SSM client for reading issuance service tokens from AWS Parameter Store."""

import boto3
from botocore.exceptions import ClientError


class SSMClient:
    """Reads the issuance service token from SSM Parameter Store."""

    def __init__(self, region: str = "eu-west-2") -> None:
        """Initialize SSM client.

        Args:
            region: AWS region for SSM client
        """
        self.client = boto3.client("ssm", region_name=region)

    def get_service_token(self, project_name: str, account: str) -> tuple[str, str]:
        """Fetch issuance service token ID and secret from SSM.

        Args:
            project_name: Project name prefix (e.g., 'db-tls')
            account: Account/environment name (e.g., 'sandbox')

        Returns:
            Tuple of (service_token_id, service_token)

        Raises:
            ValueError: If parameters not found
        """
        id_path = f"/{project_name}/{account}/issuance/service-token-id"
        token_path = f"/{project_name}/{account}/issuance/service-token"

        try:
            id_response = self.client.get_parameter(Name=id_path, WithDecryption=False)
            token_response = self.client.get_parameter(Name=token_path, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ParameterNotFound":
                raise ValueError(
                    f"Service token not found in SSM. Paths checked: {id_path}, {token_path}"
                ) from e
            raise

        return id_response["Parameter"]["Value"], token_response["Parameter"]["Value"]
