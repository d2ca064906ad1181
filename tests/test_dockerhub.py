"""Tests for core.dockerhub.DockerHubClient over a mocked transport."""
import asyncio

import httpx
import pytest

from conftest import json_response, repository_payload, tags_payload
from core.config import USER_AGENT
from core.errors import DockerHubMcpError, ImageNotFoundError, NetworkError, ServerError

REPO_PATH = "/v2/repositories/library/nginx/"
TAGS_PATH = "/v2/repositories/library/nginx/tags/"
SEARCH_PATH = "/v2/search/repositories/"


class TestGetRepository:
    def test_returns_payload_and_sends_headers(self, services, hub):
        hub.add(REPO_PATH, json_response(repository_payload()))

        repo = asyncio.run(services.client.get_repository("library", "nginx"))

        assert repo["description"] == "Official build of Nginx."
        [request] = hub.requests
        assert str(request.url) == "https://hub.test/v2/repositories/library/nginx/"
        assert request.headers["User-Agent"] == USER_AGENT
        assert request.headers["Accept"] == "application/json"

    def test_second_call_is_served_from_cache(self, services, hub):
        hub.add(REPO_PATH, json_response(repository_payload()))

        async def twice():
            await services.client.get_repository("library", "nginx")
            return await services.client.get_repository("library", "nginx")

        asyncio.run(twice())
        assert len(hub.requests) == 1

    def test_cache_entry_expires_with_repository_ttl(self, services, hub, clock):
        hub.add(REPO_PATH, json_response(repository_payload()))

        asyncio.run(services.client.get_repository("library", "nginx"))
        clock.advance(services.settings.cache_ttl.repository_info)
        asyncio.run(services.client.get_repository("library", "nginx"))

        assert len(hub.requests) == 2

    def test_not_found_is_not_retried(self, services, hub, sleep):
        hub.add(REPO_PATH, httpx.Response(404))

        with pytest.raises(ImageNotFoundError):
            asyncio.run(services.client.get_repository("library", "nginx"))

        assert len(hub.requests) == 1
        assert sleep.delays == []

    def test_server_errors_are_retried_with_backoff(self, services, hub, sleep):
        hub.add(
            REPO_PATH,
            httpx.Response(503),
            httpx.Response(502),
            json_response(repository_payload()),
        )

        repo = asyncio.run(services.client.get_repository("library", "nginx"))

        assert repo["name"] == "nginx"
        assert len(hub.requests) == 3
        assert sleep.delays == [1.0, 2.0]

    def test_rate_limit_honours_retry_after(self, services, hub, sleep):
        hub.add(
            REPO_PATH,
            httpx.Response(429, headers={"Retry-After": "7"}),
            json_response(repository_payload()),
        )

        asyncio.run(services.client.get_repository("library", "nginx"))
        assert sleep.delays == [7.0]

    def test_transport_failure_becomes_network_error_after_retries(self, services, hub, sleep):
        hub.add(REPO_PATH, httpx.ConnectError("connection refused"))

        with pytest.raises(NetworkError):
            asyncio.run(services.client.get_repository("library", "nginx"))

        assert len(hub.requests) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    def test_non_json_body_is_a_coded_error(self, services, hub):
        hub.add(REPO_PATH, httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(DockerHubMcpError) as excinfo:
            asyncio.run(services.client.get_repository("library", "nginx"))

        assert excinfo.value.code == "INVALID_RESPONSE"
        assert excinfo.value.message == "Invalid JSON response for library/nginx"

    def test_failures_are_not_cached(self, services, hub):
        hub.add(REPO_PATH, httpx.Response(404), json_response(repository_payload()))

        with pytest.raises(ImageNotFoundError):
            asyncio.run(services.client.get_repository("library", "nginx"))
        repo = asyncio.run(services.client.get_repository("library", "nginx"))

        assert repo["name"] == "nginx"


class TestTags:
    def test_paging_parameters(self, services, hub):
        hub.add(TAGS_PATH, json_response(tags_payload(["latest"])))

        asyncio.run(services.client.get_tags("library", "nginx", 2, 50))

        [request] = hub.requests
        assert request.url.params["page"] == "2"
        assert request.url.params["page_size"] == "50"

    def test_tag_details_scans_following_pages(self, services, hub):
        def by_page(request):
            if request.url.params["page"] == "1":
                return json_response(tags_payload(["latest", "alpine"], next_url="page2"))
            return json_response(tags_payload(["1.25"], images=[{"architecture": "arm64", "os": "linux"}]))

        hub.add_handler(TAGS_PATH, by_page)

        details = asyncio.run(services.client.get_tag_details("library", "nginx", "1.25"))

        assert details["name"] == "1.25"
        assert len(hub.requests) == 2

    def test_tag_details_stops_after_five_pages(self, services, hub):
        hub.add_handler(TAGS_PATH, lambda request: json_response(tags_payload(["x"], next_url="more")))

        assert asyncio.run(services.client.get_tag_details("library", "nginx", "missing")) is None
        assert len(hub.requests) == 5

    def test_tag_details_propagates_server_errors(self, services, hub):
        hub.add(TAGS_PATH, httpx.Response(500))
        with pytest.raises(ServerError):
            asyncio.run(services.client.get_tag_details("library", "nginx", "latest"))

    def test_validate_tag_exists(self, services, hub):
        hub.add(TAGS_PATH, json_response(tags_payload(["latest", "alpine"])))
        assert asyncio.run(services.client.validate_tag_exists("library", "nginx", "alpine")) is True
        assert asyncio.run(services.client.validate_tag_exists("library", "nginx", "nope")) is False


class TestSearch:
    def test_filters_are_sent_as_strings(self, services, hub):
        hub.add(SEARCH_PATH, json_response({"count": 0, "results": []}))

        asyncio.run(services.client.search_repositories("web", 1, 10, is_official=True, is_automated=False))

        params = hub.requests[0].url.params
        assert params["q"] == "web"
        assert params["page_size"] == "10"
        assert params["is_official"] == "true"
        assert params["is_automated"] == "false"

    def test_filters_are_omitted_when_unset(self, services, hub):
        hub.add(SEARCH_PATH, json_response({"count": 0, "results": []}))
        asyncio.run(services.client.search_repositories("web"))
        assert "is_official" not in hub.requests[0].url.params


class TestConvenience:
    def test_repository_readme(self, services, hub):
        hub.add(REPO_PATH, json_response(repository_payload(full_description="# nginx")))
        assert asyncio.run(services.client.get_repository_readme("library", "nginx")) == "# nginx"

    def test_readme_of_missing_image_is_none(self, services, hub):
        assert asyncio.run(services.client.get_repository_readme("library", "nginx")) is None

    def test_validate_image_exists(self, services, hub):
        hub.add(REPO_PATH, json_response(repository_payload()))
        assert asyncio.run(services.client.validate_image_exists("library", "nginx")) is True
        assert asyncio.run(services.client.validate_image_exists("library", "ghost")) is False
