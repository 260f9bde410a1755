"""Archive downloads and the shared HTTP client."""

from __future__ import annotations

import httpx
import pytest

from RegistryDocs.Stardoc import net
from RegistryDocs.Stardoc.errors import FetchError
from RegistryDocs.Stardoc.settings import HttpCfg

URL = "https://registry.example/docs.tar.gz"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_download_returns_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        return httpx.Response(200, content=b"payload")

    with _client(handler) as client:
        assert net.download_archive(URL, client=client) == b"payload"


@pytest.mark.parametrize("status", [404, 500])
def test_non_success_status_raises(status):
    with _client(lambda request: httpx.Response(status)) as client:
        with pytest.raises(FetchError) as excinfo:
            net.download_archive(URL, client=client)

    assert excinfo.value.status_code == status
    assert excinfo.value.url == URL
    assert excinfo.value.error_code == "FETCH_FAILED"


def test_oversized_payload_raises():
    cfg = HttpCfg(max_archive_bytes=10)

    with _client(lambda request: httpx.Response(200, content=b"x" * 100)) as client:
        with pytest.raises(FetchError, match="exceeds 10 bytes"):
            net.download_archive(URL, client=client, config=cfg)


def test_transport_errors_are_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with _client(handler) as client:
        with pytest.raises(FetchError) as excinfo:
            net.download_archive(URL, client=client)

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ReadTimeout)


def test_shared_client_is_used_when_none_given():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, content=b"ok")

    net.configure_http_client(_client(handler))

    assert net.download_archive(URL) == b"ok"
    assert calls == ["/docs.tar.gz"]


def test_shared_client_lifecycle():
    first = net.get_http_client()

    assert net.get_http_client() is first
    assert first.headers["User-Agent"].startswith("registrydocs-stardoc/")

    net.reset_http_client()
    second = net.get_http_client(HttpCfg(user_agent="custom/1.0"))

    assert second is not first
    assert first.is_closed
    assert second.headers["User-Agent"] == "custom/1.0"
