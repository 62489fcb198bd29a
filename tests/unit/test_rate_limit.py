"""Tests for rate limiting utilities."""

from __future__ import annotations

from unittest.mock import patch

from kubernetes.client.exceptions import ApiException

from s3_website_operator.utils import rate_limit
from s3_website_operator.utils.rate_limit import (
    _Throttle,
    handle_rate_limit_error,
    rate_limit_k8s,
    rate_limit_s3,
)


class TestThrottle:
    """Test cases for the shared throttle."""

    def test_interval_from_rate(self):
        """Test the minimum interval follows the configured rate."""
        assert _Throttle(4.0).min_interval == 0.25

    def test_zero_rate_disables_throttling(self):
        """Test a non-positive rate means no waiting."""
        assert _Throttle(0).min_interval == 0.0

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_sleeps_when_calls_are_too_fast(self, mock_sleep):
        """Test the second call waits out the remaining interval."""
        throttle = _Throttle(1.0)
        with patch("s3_website_operator.utils.rate_limit.time.monotonic", side_effect=[10.0, 10.0, 10.25, 11.0]):
            throttle.wait()
            throttle.wait()

        mock_sleep.assert_called_once()
        assert abs(mock_sleep.call_args.args[0] - 0.75) < 1e-9

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_no_sleep_after_interval(self, mock_sleep):
        """Test calls spaced out enough do not wait."""
        throttle = _Throttle(1.0)
        with patch("s3_website_operator.utils.rate_limit.time.monotonic", side_effect=[10.0, 10.0, 12.0, 12.0]):
            throttle.wait()
            throttle.wait()
        mock_sleep.assert_not_called()


class TestDecorators:
    """Test cases for the rate limiting decorators."""

    def test_rate_limit_k8s_passes_arguments(self):
        """Test the wrapped function receives its arguments."""
        @rate_limit_k8s
        def get_provider(name, namespace=None):
            return f"{namespace}/{name}"

        with patch.object(rate_limit._k8s_throttle, "wait") as mock_wait:
            assert get_provider("wasabi", namespace="web") == "web/wasabi"
        mock_wait.assert_called_once()

    def test_rate_limit_s3_uses_shared_throttle(self):
        """Test every S3 call goes through the same throttle."""
        with patch.object(rate_limit._s3_throttle, "wait") as mock_wait:
            rate_limit_s3(lambda Bucket: Bucket)(Bucket="a")
            rate_limit_s3(lambda Bucket: Bucket)(Bucket="b")
        assert mock_wait.call_count == 2

    def test_wrapper_keeps_name(self):
        """Test functools.wraps metadata is preserved."""
        def put_bucket_website():
            pass

        assert rate_limit_s3(put_bucket_website).__name__ == "put_bucket_website"


class TestHandleRateLimitError:
    """Test cases for handling rate limit errors."""

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_handle_429_error(self, mock_sleep):
        """Test handling 429 rate limit error."""
        assert handle_rate_limit_error(ApiException(status=429, reason="Too Many Requests")) is True
        mock_sleep.assert_called_once_with(1)

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_handle_503_with_rate_limit(self, mock_sleep):
        """Test handling 503 error with rate limit message."""
        error = ApiException(status=503, reason="Service Unavailable: rate limit exceeded")
        assert handle_rate_limit_error(error) is True

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_handle_503_without_rate_limit(self, mock_sleep):
        """Test a plain 503 is not treated as rate limiting."""
        assert handle_rate_limit_error(ApiException(status=503, reason="Service Unavailable")) is False
        mock_sleep.assert_not_called()

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_handle_non_rate_limit_error(self, mock_sleep):
        """Test handling non-rate-limit errors."""
        assert handle_rate_limit_error(ApiException(status=404, reason="Not Found")) is False
        mock_sleep.assert_not_called()

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_exponential_backoff(self, mock_sleep):
        """Test backoff doubles with each attempt."""
        error = ApiException(status=429, reason="Too Many Requests")
        for attempt in range(3):
            assert handle_rate_limit_error(error, attempt) is True
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1, 2, 4]

    @patch("s3_website_operator.utils.rate_limit.time.sleep")
    def test_max_retries_exceeded(self, mock_sleep):
        """Test no retry once the attempts are used up."""
        error = ApiException(status=429, reason="Too Many Requests")
        assert handle_rate_limit_error(error, attempt=3, max_retries=3) is False
        mock_sleep.assert_not_called()

    def test_exception_without_status(self):
        """Test exceptions without a status are not rate limits."""
        assert handle_rate_limit_error(ValueError("boom")) is False
