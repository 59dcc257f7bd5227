# lambdas/hello_agent/secret_store.py
import json
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from .errors import SecretNotFoundError
from .models import settings


def get_secret_string(secret_name: str, client: Optional[Any] = None) -> str:
    """
    Reads the current SecretString of a Secrets Manager secret.

    Raises:
        SecretNotFoundError: If the secret has no string value.
        ClientError: If the boto3 call to Secrets Manager fails.
    """
    if client is None:
        client = boto3.client('secretsmanager', region_name=settings.aws_region)

    try:
        response = client.get_secret_value(
            SecretId=secret_name,
            VersionStage='AWSCURRENT',
        )
    except ClientError as e:
        print(f"Error getting secret '{secret_name}': {e}")
        # Re-raise the exception to be handled by the main handler
        raise

    secret_string = response.get('SecretString')
    if not secret_string:
        raise SecretNotFoundError(f"Secret '{secret_name}' has no SecretString value.")
    return secret_string


def get_secret_field(secret_name: str, field: str, client: Optional[Any] = None) -> Any:
    """
    Returns one field of a JSON secret. If the field holds a JSON document
    itself (credentials stored as nested JSON), it is decoded as well.
    """
    secret = json.loads(get_secret_string(secret_name, client=client))
    if not isinstance(secret, dict) or field not in secret:
        raise SecretNotFoundError(f"Field '{field}' not found in secret '{secret_name}'.")

    value = secret[field]
    if isinstance(value, str) and value.lstrip().startswith('{'):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value
