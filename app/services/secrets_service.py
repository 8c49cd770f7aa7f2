import base64
import json

import structlog
from botocore.exceptions import ClientError

from app.services.aws import secrets_client

logger = structlog.get_logger()


class SecretsService:
    """Reads JSON secrets from AWS Secrets Manager."""

    def __init__(self, client=None):
        self.client = client or secrets_client

    def get_secret(self, secret_name: str) -> dict:
        try:
            response = self.client.get_secret_value(SecretId=secret_name)
        except ClientError as e:
            logger.error("secrets_client_error", secret_name=secret_name, error=str(e))
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                raise ValueError(f"Secret '{secret_name}' not found.") from e
            raise

        if "SecretString" in response:
            secret = response["SecretString"]
        elif "SecretBinary" in response:
            secret = base64.b64decode(response["SecretBinary"]).decode("utf-8")
        else:
            raise ValueError("SecretString and SecretBinary are both missing from the response.")

        try:
            values = json.loads(secret)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to decode secret '{secret_name}' as JSON") from e

        if not isinstance(values, dict):
            raise ValueError(f"Secret '{secret_name}' is not a JSON object")
        return values
