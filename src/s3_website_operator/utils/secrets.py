"""Reading provider credentials from Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from kubernetes import client


def _decode(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        # Already decoded, e.g. a secret created through stringData by a fake client
        return value


def get_secret_values(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    keys: list[str],
) -> dict[str, str]:
    """Read several keys from one secret with a single API call.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret
        keys: Keys to read

    Returns:
        Decoded values by key

    Raises:
        ValueError: If the secret or any of the keys is missing
    """
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise ValueError(f"Secret '{secret_name}' not found in namespace '{namespace}'") from e
        raise

    data = secret.data or {}
    missing = [key for key in keys if key not in data]
    if missing:
        raise ValueError(f"Key '{missing[0]}' not found in secret '{secret_name}'")
    return {key: _decode(data[key]) for key in keys}


def get_secret_value(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    key: str,
) -> str:
    """Get a single decoded value from a Kubernetes secret."""
    return get_secret_values(api, namespace, secret_name, [key])[key]
