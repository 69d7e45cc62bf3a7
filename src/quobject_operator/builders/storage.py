"""Builder for S3 storage clients."""

from __future__ import annotations

from kubernetes import client

from ..config import OperatorConfig, get_config
from ..services.aws.client import S3StorageClient
from ..services.aws.models import StorageCredentials
from ..utils.errors import CredentialsError, sanitize_exception
from ..utils.secrets import read_secret_data


def load_storage_credentials(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
) -> StorageCredentials:
    """Read the storage credential secret.

    Credentials are read on every call so that rotated secrets take effect on
    the next reconcile.

    Args:
        api: Kubernetes CoreV1Api instance
        namespace: Namespace of the credential secret
        secret_name: Name of the credential secret

    Returns:
        Parsed storage credentials

    Raises:
        CredentialsError: If the secret cannot be read or is incomplete
    """
    try:
        data = read_secret_data(api, namespace, secret_name)
    except client.exceptions.ApiException as e:
        raise CredentialsError(
            f"Failed to read credential secret '{secret_name}' in namespace '{namespace}': {sanitize_exception(e)}"
        ) from e
    return StorageCredentials.from_secret_data(data)


def create_storage_client(
    credentials: StorageCredentials,
    config: OperatorConfig | None = None,
) -> S3StorageClient:
    """Create an S3 storage client from credentials.

    Args:
        credentials: Parsed storage credentials
        config: Operator configuration for timeouts (defaults to the process config)

    Returns:
        Configured storage client
    """
    config = config or get_config()
    return S3StorageClient.from_credentials(
        credentials,
        connect_timeout=config.s3_connect_timeout_seconds,
        read_timeout=config.s3_read_timeout_seconds,
    )
