"""Builder for S3 provider instances."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config

from ..services.aws.client import AWSProvider
from ..utils.secrets import get_secret_values

SUPPORTED_PROVIDER_TYPES = ("wasabi", "aws", "custom")


def create_provider_from_spec(
    spec: dict[str, Any],
    meta: dict[str, Any],
) -> AWSProvider:
    """Create an S3 provider instance from a Provider CRD spec.

    Args:
        spec: Provider CRD spec
        meta: Provider resource metadata

    Returns:
        Configured S3 provider instance

    Raises:
        ValueError: If configuration is invalid
    """
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    api = client.CoreV1Api()

    namespace = meta.get("namespace", "default")

    # Get auth credentials from secrets
    auth = spec.get("auth", {})
    access_key_ref = auth.get("accessKeySecretRef", {})
    secret_key_ref = auth.get("secretKeySecretRef", {})

    access_key_name = access_key_ref.get("name")
    access_key_key = access_key_ref.get("key", "access-key")
    secret_key_name = secret_key_ref.get("name")
    secret_key_key = secret_key_ref.get("key", "secret-key")

    if not access_key_name or not secret_key_name:
        raise ValueError("accessKeySecretRef and secretKeySecretRef are required")

    endpoint = spec.get("endpoint")
    region = spec.get("region")
    if not endpoint or not region:
        raise ValueError("endpoint and region are required")

    provider_type = spec.get("type", "custom")
    if provider_type not in SUPPORTED_PROVIDER_TYPES:
        raise ValueError(f"Unsupported provider type: {provider_type}")

    # Credentials usually live in one secret, so read each secret once
    refs = {"access_key": (access_key_name, access_key_key), "secret_key": (secret_key_name, secret_key_key)}
    session_token_ref = auth.get("sessionTokenSecretRef") or {}
    if session_token_ref.get("name"):
        refs["session_token"] = (session_token_ref["name"], session_token_ref.get("key", "session-token"))

    keys_by_secret: dict[str, list[str]] = {}
    for secret_name, key in refs.values():
        keys_by_secret.setdefault(secret_name, []).append(key)
    values = {
        secret_name: get_secret_values(api, namespace, secret_name, keys)
        for secret_name, keys in keys_by_secret.items()
    }
    credentials = {field: values[secret_name][key] for field, (secret_name, key) in refs.items()}

    tls_config = spec.get("tls", {})
    timeouts = spec.get("timeouts", {})

    return AWSProvider(
        endpoint=endpoint,
        region=region,
        access_key=credentials["access_key"],
        secret_key=credentials["secret_key"],
        session_token=credentials.get("session_token"),
        path_style=spec.get("pathStyle", True),
        insecure_skip_verify=tls_config.get("insecureSkipVerify", False),
        connect_timeout=_optional_float(timeouts.get("connectSeconds"), "timeouts.connectSeconds"),
        read_timeout=_optional_float(timeouts.get("readSeconds"), "timeouts.readSeconds"),
        max_attempts=_optional_int(spec.get("maxAttempts"), "maxAttempts"),
    )


def _optional_float(value: Any, field: str) -> float | None:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{field} must be a number, got {value!r}") from e
    if result <= 0:
        raise ValueError(f"{field} must be positive, got {value!r}")
    return result


def _optional_int(value: Any, field: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{field} must be a positive integer, got {value!r}")
    return value
