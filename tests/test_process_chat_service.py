"""Tests for the cost heuristic that picks a backend."""
import asyncio
import json

import httpx
import pytest

from app.config import Settings
from app.services.errors import BackendHTTPError, ConfigurationError
from app.services.process_chat_service import Backend, choose_backend, proxy_length, route_and_call


def _user(content):
    return {"role": "user", "content": content}


class TestProxyLength:
    def test_joins_with_single_spaces(self):
        assert proxy_length([_user("ab"), _user("cde")]) == len("ab cde")

    def test_empty_conversation(self):
        assert proxy_length([]) == 0

    def test_missing_content_counts_as_empty(self):
        assert proxy_length([{"role": "user"}, _user("abc")]) == len(" abc")

    def test_whitespace_not_collapsed(self):
        assert proxy_length([_user("a   b\n\n")]) == 7


class TestChooseBackend:
    def test_short_prompt_goes_local(self, local_settings):
        assert choose_backend([_user("hi")], local_settings) is Backend.LOCAL

    def test_short_prompt_without_local_goes_remote(self, remote_only_settings):
        assert choose_backend([_user("hi")], remote_only_settings) is Backend.REMOTE

    def test_long_prompt_goes_remote(self, local_settings):
        assert choose_backend([_user("x" * 2001)], local_settings) is Backend.REMOTE

    def test_threshold_boundary_is_strict(self):
        settings = Settings(local_model_threshold=10, local_model_url="http://localhost/api/chat")
        assert choose_backend([_user("x" * 9)], settings) is Backend.LOCAL
        assert choose_backend([_user("x" * 10)], settings) is Backend.REMOTE

    def test_separators_count_towards_length(self):
        settings = Settings(local_model_threshold=10, local_model_url="http://localhost/api/chat")
        # 5 + 1 + 4 == 10
        assert choose_backend([_user("x" * 5), _user("x" * 4)], settings) is Backend.REMOTE

    def test_empty_conversation_goes_local(self, local_settings):
        assert choose_backend([], local_settings) is Backend.LOCAL


class TestRouteAndCall:
    def test_default_remote_model(self, remote_only_settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})

        reply = asyncio.run(route_and_call([_user("hi")], remote_only_settings, transport=httpx.MockTransport(handler)))
        assert reply == "hello"
        assert seen[0].url.host == "api.together.xyz"
        assert json.loads(seen[0].content)["model"] == "deepseek-coder-6.7b-instruct"

    def test_local_dispatch(self, local_settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"message": {"content": "local reply"}})

        reply = asyncio.run(route_and_call([_user("hi")], local_settings, transport=httpx.MockTransport(handler)))
        assert reply == "local reply"
        assert [r.url.host for r in seen] == ["localhost"]

    def test_local_failure_does_not_fall_back(self, local_settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(500)

        with pytest.raises(BackendHTTPError):
            asyncio.run(route_and_call([_user("hi")], local_settings, transport=httpx.MockTransport(handler)))
        assert len(seen) == 1

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError):
            asyncio.run(route_and_call([_user("hi")], Settings()))
