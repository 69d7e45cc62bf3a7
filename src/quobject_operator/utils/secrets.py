"""Utilities for reading Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii
import time

from kubernetes import client

from .. import metrics
from .context import check_deadline
from .errors import CredentialsError


def decode_secret_data(secret_name: str, data: dict[str, str | bytes] | None) -> dict[str, str]:
    """Decode the base64 ``data`` map of a secret.

    Raises:
        CredentialsError: If a value is not valid base64-encoded UTF-8
    """
    result = {}
    for key, value in (data or {}).items():
        try:
            if isinstance(value, bytes):
                result[key] = value.decode("utf-8")
            else:
                result[key] = base64.b64decode(value, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise CredentialsError(f"Key '{key}' in secret '{secret_name}' is not valid base64 text") from e
    return result


def read_secret_data(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
) -> dict[str, str]:
    """Read all data from a Kubernetes secret.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret

    Returns:
        Dictionary of secret data (decoded)

    Raises:
        CredentialsError: If the secret is not found or cannot be decoded
        client.exceptions.ApiException: For other API errors
    """
    check_deadline("read_secret")
    start_time = time.time()
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
        metrics.api_call_total.labels(api_type="k8s", operation="read_secret", result="success").inc()
    except client.exceptions.ApiException as e:
        metrics.api_call_total.labels(api_type="k8s", operation="read_secret", result="error").inc()
        if e.status == 404:
            raise CredentialsError(f"Secret '{secret_name}' not found in namespace '{namespace}'") from e
        raise
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation="read_secret").observe(duration)

    return decode_secret_data(secret_name, secret.data)
