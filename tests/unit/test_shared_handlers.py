"""Tests for shared handler utilities."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from kubernetes import client

from s3_website_operator.handlers.shared import get_k8s_client, get_provider_with_cache, is_provider_ready
from s3_website_operator.utils.cache import invalidate_cache


@pytest.fixture(autouse=True)
def clear_cache():
    invalidate_cache()
    yield
    invalidate_cache()


@pytest.fixture(autouse=True)
def no_throttle():
    with patch("s3_website_operator.handlers.shared.rate_limit_k8s", side_effect=lambda fn: fn):
        yield


class TestGetProviderWithCache:
    """Test cases for get_provider_with_cache function."""

    @patch("s3_website_operator.handlers.shared.metrics")
    def test_get_provider_from_api_then_cache(self, mock_metrics):
        """Test the first read hits the API and the second the cache."""
        api = Mock()
        provider_obj = {"metadata": {"name": "wasabi"}, "spec": {}}
        api.get_namespaced_custom_object.return_value = provider_obj

        assert get_provider_with_cache(api, "wasabi", "web") == provider_obj
        assert get_provider_with_cache(api, "wasabi", "web") == provider_obj

        api.get_namespaced_custom_object.assert_called_once_with(
            group="s3.cloud37.dev",
            version="v1alpha1",
            namespace="web",
            plural="providers",
            name="wasabi",
        )
        mock_metrics.api_call_total.labels.assert_called_with(
            api_type="k8s", operation="get_provider", result="cache_hit"
        )

    @patch("s3_website_operator.handlers.shared.handle_rate_limit_error")
    @patch("s3_website_operator.handlers.shared.metrics")
    def test_retries_rate_limited_reads(self, mock_metrics, mock_handle_rate_limit):
        """Test a rate limited read is retried."""
        api = Mock()
        provider_obj = {"metadata": {"name": "wasabi"}}
        api.get_namespaced_custom_object.side_effect = [client.exceptions.ApiException(status=429), provider_obj]
        mock_handle_rate_limit.return_value = True

        assert get_provider_with_cache(api, "wasabi", "web") == provider_obj
        assert api.get_namespaced_custom_object.call_count == 2
        mock_handle_rate_limit.assert_called_once()
        assert mock_handle_rate_limit.call_args.args[1] == 0
        mock_metrics.rate_limit_hits_total.labels.assert_called_once_with(api_type="k8s")

    @patch("s3_website_operator.handlers.shared.metrics")
    def test_not_found_raises(self, mock_metrics):
        """Test a missing provider is raised to the caller and not cached."""
        api = Mock()
        api.get_namespaced_custom_object.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(client.exceptions.ApiException):
            get_provider_with_cache(api, "missing", "web")
        with pytest.raises(client.exceptions.ApiException):
            get_provider_with_cache(api, "missing", "web")
        assert api.get_namespaced_custom_object.call_count == 2


class TestIsProviderReady:
    """Test cases for is_provider_ready."""

    def test_no_status_is_ready(self):
        """Test providers without a Ready condition are usable."""
        assert is_provider_ready({"spec": {}})

    def test_ready_true(self):
        """Test an explicit Ready=True provider is usable."""
        assert is_provider_ready({"status": {"conditions": [{"type": "Ready", "status": "True"}]}})

    def test_ready_false(self):
        """Test an explicit Ready=False provider blocks reconciliation."""
        assert not is_provider_ready({"status": {"conditions": [{"type": "Ready", "status": "False"}]}})


class TestGetK8sClient:
    """Test cases for get_k8s_client."""

    @patch("kubernetes.client.CustomObjectsApi")
    @patch("kubernetes.config.load_kube_config")
    @patch("kubernetes.config.load_incluster_config")
    def test_falls_back_to_kube_config(self, mock_incluster, mock_kube, mock_api):
        """Test kube config is used outside the cluster."""
        from kubernetes import config

        mock_incluster.side_effect = config.ConfigException("no cluster")
        get_k8s_client()
        mock_kube.assert_called_once()
        mock_api.assert_called_once()
