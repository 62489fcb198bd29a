"""Tests for the provider builder."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from s3_website_operator.builders.provider import create_provider_from_spec

SECRETS = {
    "wasabi-creds": {"access-key": "AKIATEST", "secret-key": "secret"},
    "sts-creds": {"token": "session"},
}


def _secret_lookup(api, namespace, name, keys):
    return {key: SECRETS[name][key] for key in keys}


@pytest.fixture
def provider_spec():
    """A minimal valid Provider spec."""
    return {
        "type": "wasabi",
        "endpoint": "https://s3.wasabisys.com",
        "region": "us-east-1",
        "auth": {
            "accessKeySecretRef": {"name": "wasabi-creds"},
            "secretKeySecretRef": {"name": "wasabi-creds"},
        },
    }


@pytest.fixture
def meta():
    return {"name": "wasabi", "namespace": "web"}


@pytest.fixture(autouse=True)
def k8s():
    """Patch kubernetes config loading and secret lookups."""
    with (
        patch("s3_website_operator.builders.provider.config.load_incluster_config"),
        patch("s3_website_operator.builders.provider.client.CoreV1Api"),
        patch("s3_website_operator.builders.provider.get_secret_values", side_effect=_secret_lookup) as mock_secret,
        patch("s3_website_operator.builders.provider.AWSProvider") as mock_provider,
    ):
        yield MagicMock(secret=mock_secret, provider=mock_provider)


class TestCreateProviderFromSpec:
    """Test cases for create_provider_from_spec."""

    def test_minimal_spec(self, provider_spec, meta, k8s):
        """Test defaults are applied for optional settings."""
        create_provider_from_spec(provider_spec, meta)

        kwargs = k8s.provider.call_args.kwargs
        assert kwargs["endpoint"] == "https://s3.wasabisys.com"
        assert kwargs["region"] == "us-east-1"
        assert kwargs["access_key"] == "AKIATEST"
        assert kwargs["secret_key"] == "secret"
        assert kwargs["session_token"] is None
        assert kwargs["path_style"] is True
        assert kwargs["insecure_skip_verify"] is False
        assert kwargs["connect_timeout"] is None
        assert kwargs["read_timeout"] is None
        assert kwargs["max_attempts"] is None

    def test_shared_secret_read_once(self, provider_spec, meta, k8s):
        """Test both keys in one secret are read with a single lookup in the provider namespace."""
        create_provider_from_spec(provider_spec, meta)
        k8s.secret.assert_called_once()
        _, namespace, name, keys = k8s.secret.call_args.args
        assert (namespace, name, keys) == ("web", "wasabi-creds", ["access-key", "secret-key"])

    def test_session_token(self, provider_spec, meta, k8s):
        """Test an optional session token secret is read."""
        provider_spec["auth"]["sessionTokenSecretRef"] = {"name": "sts-creds", "key": "token"}
        create_provider_from_spec(provider_spec, meta)
        assert k8s.provider.call_args.kwargs["session_token"] == "session"

    def test_timeouts_and_attempts(self, provider_spec, meta, k8s):
        """Test timeouts and retry attempts are passed through."""
        provider_spec["timeouts"] = {"connectSeconds": 2, "readSeconds": "7.5"}
        provider_spec["maxAttempts"] = 5
        provider_spec["pathStyle"] = False
        provider_spec["tls"] = {"insecureSkipVerify": True}

        create_provider_from_spec(provider_spec, meta)

        kwargs = k8s.provider.call_args.kwargs
        assert kwargs["connect_timeout"] == 2.0
        assert kwargs["read_timeout"] == 7.5
        assert kwargs["max_attempts"] == 5
        assert kwargs["path_style"] is False
        assert kwargs["insecure_skip_verify"] is True

    def test_kube_config_fallback(self, provider_spec, meta):
        """Test kube config is loaded outside the cluster."""
        from kubernetes import config

        with (
            patch(
                "s3_website_operator.builders.provider.config.load_incluster_config",
                side_effect=config.ConfigException("not in cluster"),
            ),
            patch("s3_website_operator.builders.provider.config.load_kube_config") as mock_kube,
        ):
            create_provider_from_spec(provider_spec, meta)
        mock_kube.assert_called_once()

    def test_missing_secret_refs(self, provider_spec, meta):
        """Test both credential references are required."""
        del provider_spec["auth"]["secretKeySecretRef"]
        with pytest.raises(ValueError, match="accessKeySecretRef and secretKeySecretRef are required"):
            create_provider_from_spec(provider_spec, meta)

    def test_missing_endpoint(self, provider_spec, meta):
        """Test endpoint and region are required."""
        del provider_spec["endpoint"]
        with pytest.raises(ValueError, match="endpoint and region are required"):
            create_provider_from_spec(provider_spec, meta)

    def test_unsupported_type(self, provider_spec, meta):
        """Test unknown provider types are rejected."""
        provider_spec["type"] = "gcs"
        with pytest.raises(ValueError, match="Unsupported provider type: gcs"):
            create_provider_from_spec(provider_spec, meta)

    @pytest.mark.parametrize("value", [0, -1, "soon"])
    def test_invalid_timeout(self, provider_spec, meta, value):
        """Test timeouts must be positive numbers."""
        provider_spec["timeouts"] = {"readSeconds": value}
        with pytest.raises(ValueError, match="timeouts.readSeconds"):
            create_provider_from_spec(provider_spec, meta)

    @pytest.mark.parametrize("value", [0, 2.5, True, "3"])
    def test_invalid_max_attempts(self, provider_spec, meta, value):
        """Test maxAttempts must be a positive integer."""
        provider_spec["maxAttempts"] = value
        with pytest.raises(ValueError, match="maxAttempts"):
            create_provider_from_spec(provider_spec, meta)
