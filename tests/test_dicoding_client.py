"""Tests for the learning platform client and HTML text extraction."""
import httpx
import pytest

from backend.core.dicoding_client import DicodingClient
from backend.core.errors import UpstreamUnavailable
from backend.utils.html_parser import extract_text

BASE_URL = "https://dicoding.test/api"


def _client(handler) -> DicodingClient:
    transport = httpx.MockTransport(handler)
    return DicodingClient(BASE_URL, client=httpx.AsyncClient(base_url=BASE_URL, transport=transport))


class TestDicodingClient:

    async def test_tutorial_content(self):
        def handler(request):
            assert request.url.path == "/api/tutorials/35363"
            return httpx.Response(200, json={"data": {"content": "<p>Hello</p>"}})

        assert await _client(handler).get_tutorial_content("35363") == "<p>Hello</p>"

    async def test_missing_content_field(self):
        client = _client(lambda request: httpx.Response(200, json={"data": {}}))
        with pytest.raises(UpstreamUnavailable):
            await client.get_tutorial_content("1")

    async def test_user_preferences(self, preferences_data, preferences):
        def handler(request):
            assert request.url.path == "/api/users/u1/preferences"
            return httpx.Response(200, json={"data": {"preference": preferences_data}})

        assert await _client(handler).get_user_preferences("u1") == preferences

    async def test_invalid_preferences(self):
        client = _client(lambda request: httpx.Response(200, json={"data": {"preference": {"theme": "neon"}}}))
        with pytest.raises(UpstreamUnavailable):
            await client.get_user_preferences("u1")

    async def test_http_error_status(self):
        client = _client(lambda request: httpx.Response(503, json={"message": "down"}))
        with pytest.raises(UpstreamUnavailable):
            await client.get_tutorial_content("1")

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamUnavailable):
            await _client(handler).get_user_preferences("u1")

    async def test_ids_stay_within_one_path_segment(self, preferences_data):
        paths = []

        def handler(request):
            paths.append(request.url.raw_path)
            if request.url.raw_path.startswith(b"/api/tutorials/"):
                return httpx.Response(200, json={"data": {"content": "<p>x</p>"}})
            return httpx.Response(200, json={"data": {"preference": preferences_data}})

        client = _client(handler)
        await client.get_tutorial_content("../users/x/preferences")
        await client.get_user_preferences("a/b?c")

        assert paths == [
            b"/api/tutorials/..%2Fusers%2Fx%2Fpreferences",
            b"/api/users/a%2Fb%3Fc/preferences",
        ]


class TestExtractText:

    def test_collapses_whitespace_and_blocks(self):
        html = "<html><head><title>T</title></head><body><h1>Intro</h1>\n\n<p>Some   <b>bold</b> text</p></body></html>"
        assert extract_text(html) == "Intro Some bold text"

    def test_drops_scripts_and_styles(self):
        html = "<body><script>var x = 1;</script><style>p {}</style><p>Visible</p></body>"
        assert extract_text(html) == "Visible"

    def test_decodes_entities(self):
        assert extract_text("<p>a &amp; b</p>") == "a & b"
