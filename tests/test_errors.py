"""Tests for core.errors - status mapping and error classification."""
import httpx
import pytest

from core.errors import (
    DockerHubMcpError,
    ErrorKind,
    ImageNotFoundError,
    NetworkError,
    RateLimitError,
    ServerError,
    TagNotFoundError,
    ValidationError,
    classify_error,
    handle_api_error,
    handle_http_error,
    kind_for_status,
)


class TestKindForStatus:
    @pytest.mark.parametrize("status, kind", [
        (404, ErrorKind.NOT_FOUND),
        (429, ErrorKind.RATE_LIMITED),
        (500, ErrorKind.SERVER_ERROR),
        (503, ErrorKind.SERVER_ERROR),
        (400, ErrorKind.CLIENT_ERROR),
        (403, ErrorKind.CLIENT_ERROR),
        (None, ErrorKind.UNKNOWN),
    ])
    def test_mapping(self, status, kind):
        assert kind_for_status(status) is kind


class TestHandleHttpError:
    def test_success_is_a_no_op(self):
        handle_http_error(200, httpx.Response(200), "library/nginx")

    def test_404_is_image_not_found(self):
        with pytest.raises(ImageNotFoundError) as excinfo:
            handle_http_error(404, httpx.Response(404), "library/nope")
        assert excinfo.value.code == "IMAGE_NOT_FOUND"
        assert excinfo.value.status_code == 404
        assert "library/nope" in excinfo.value.message

    def test_429_carries_retry_after(self):
        response = httpx.Response(429, headers={"Retry-After": "30"})
        with pytest.raises(RateLimitError) as excinfo:
            handle_http_error(429, response, "docker hub")
        assert excinfo.value.retry_after == 30
        assert excinfo.value.kind is ErrorKind.RATE_LIMITED

    def test_429_with_http_date_has_no_hint(self):
        response = httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"})
        with pytest.raises(RateLimitError) as excinfo:
            handle_http_error(429, response, "docker hub")
        assert excinfo.value.retry_after is None

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_5xx_is_server_error(self, status):
        with pytest.raises(ServerError) as excinfo:
            handle_http_error(status, httpx.Response(status), "library/nginx")
        assert excinfo.value.kind is ErrorKind.SERVER_ERROR
        assert excinfo.value.status_code == status

    def test_server_error_names_the_upstream(self):
        with pytest.raises(ServerError) as excinfo:
            handle_http_error(503, httpx.Response(503), "library/nginx")
        assert excinfo.value.message == "Docker Hub server error (503) for library/nginx"

        with pytest.raises(ServerError) as excinfo:
            handle_http_error(503, httpx.Response(503), "acme/widget", service="GitHub")
        assert excinfo.value.message == "GitHub server error (503) for acme/widget"

    def test_other_statuses_keep_code_and_reason(self):
        with pytest.raises(DockerHubMcpError) as excinfo:
            handle_http_error(403, httpx.Response(403), "library/nginx")
        error = excinfo.value
        assert error.code == "HTTP_ERROR"
        assert error.status_code == 403
        assert error.kind is ErrorKind.CLIENT_ERROR
        assert error.message == "HTTP 403: Forbidden (library/nginx)"


class TestClassifyError:
    def test_domain_errors_use_their_kind(self):
        assert classify_error(TagNotFoundError("a/b", "x")).kind is ErrorKind.NOT_FOUND
        assert classify_error(ValidationError("bad")).retryable is False
        assert classify_error(NetworkError("down")).retryable is True

    def test_rate_limit_exposes_retry_after(self):
        classified = classify_error(RateLimitError("hub", retry_after=12))
        assert classified.kind is ErrorKind.RATE_LIMITED
        assert classified.retry_after == 12

    def test_transport_errors_are_network_failures(self):
        assert classify_error(httpx.ConnectError("refused")).kind is ErrorKind.NETWORK_FAILURE
        assert classify_error(TimeoutError()).kind is ErrorKind.NETWORK_FAILURE

    def test_anything_else_is_unknown_and_retryable(self):
        classified = classify_error(KeyError("x"))
        assert classified.kind is ErrorKind.UNKNOWN
        assert classified.retryable is True


class TestHandleApiError:
    def test_domain_error_is_reraised_unchanged(self):
        error = ImageNotFoundError("a/b")
        with pytest.raises(ImageNotFoundError) as excinfo:
            handle_api_error(error, "ctx")
        assert excinfo.value is error

    def test_timeout_becomes_network_error(self):
        with pytest.raises(NetworkError) as excinfo:
            handle_api_error(httpx.ReadTimeout("slow"), "get tags")
        assert excinfo.value.message == "Network error: Request timeout in get tags"

    def test_connection_failure_becomes_network_error(self):
        with pytest.raises(NetworkError) as excinfo:
            handle_api_error(httpx.ConnectError("refused"), "get tags")
        assert excinfo.value.message == "Network error: Connection failed in get tags"

    def test_unexpected_error_is_wrapped(self):
        with pytest.raises(DockerHubMcpError) as excinfo:
            handle_api_error(ValueError("boom"), "parse")
        assert excinfo.value.code == "UNEXPECTED_ERROR"
        assert excinfo.value.message == "Unexpected error in parse: boom"


def test_to_dict():
    error = RateLimitError("hub", retry_after=5)
    assert error.to_dict() == {
        "error": "Rate limit exceeded for hub",
        "code": "RATE_LIMIT_EXCEEDED",
        "kind": "rate_limited",
        "status_code": 429,
    }
