"""
Tests for infra/llm/client.py and its transport.

HTTP is stubbed at requests.post; nothing leaves the process.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from infra.errors import AdapterError, MalformedResponseError
from infra.llm import LLMClient, LLMParams


POST = "infra.llm.openai_compat.transport.requests.post"


def make_response(status=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    response.text = text
    return response


def completion(content="# Title", prompt_tokens=12, completion_tokens=7):
    return {
        "model": "gpt-4o-mini",
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens},
    }


@pytest.fixture
def client():
    return LLMClient(api_key="sk-test", base_url="http://llm.local/v1/", timeout=5)


class TestLLMClientCall:

    def test_returns_content_and_usage(self, client):
        with patch(POST, return_value=make_response(body=completion())) as post:
            content, usage = client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])

        assert content == "# Title"
        assert usage == {"prompt_tokens": 12, "completion_tokens": 7}

        args, kwargs = post.call_args
        assert args[0] == "http://llm.local/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["timeout"] == 5
        assert kwargs["json"]["model"] == "gpt-4o-mini"

    def test_llm_params_only_sends_set_values(self, client):
        with patch(POST, return_value=make_response(body=completion())) as post:
            client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}],
                        llm_params=LLMParams(temperature=0.2, max_tokens=100))

        payload = post.call_args.kwargs["json"]
        assert payload["temperature"] == 0.2
        assert payload["max_tokens"] == 100
        assert "top_p" not in payload

    def test_images_attached_to_user_message(self, client, png_file):
        messages = [{"role": "system", "content": "transcribe"}, {"role": "user", "content": ""}]

        with patch(POST, return_value=make_response(body=completion())) as post:
            client.call("gpt-4o-mini", messages, images=[png_file])

        user = post.call_args.kwargs["json"]["messages"][-1]
        assert len(user["content"]) == 1
        assert user["content"][0]["type"] == "image_url"
        assert user["content"][0]["image_url"]["url"].startswith("data:image/jpeg;base64,")
        # Caller's messages are not mutated
        assert messages[-1]["content"] == ""

    def test_response_format_passed_through(self, client):
        with patch(POST, return_value=make_response(body=completion("{}"))) as post:
            client.simple_call("gpt-4o-mini", "sys", "user", response_format={"type": "json_object"})

        payload = post.call_args.kwargs["json"]
        assert payload["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in payload["messages"]] == ["system", "user"]

    def test_null_content_becomes_empty_string(self, client):
        with patch(POST, return_value=make_response(body=completion(content=None))):
            content, _ = client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])
        assert content == ""


class TestLLMClientErrors:

    def test_http_error_raises_adapter_error(self, client):
        body = {"error": {"message": "invalid api key"}}
        with patch(POST, return_value=make_response(status=401, body=body)):
            with pytest.raises(AdapterError, match="HTTP 401.*invalid api key"):
                client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])

    def test_timeout_raises_adapter_error(self, client):
        with patch(POST, side_effect=requests.exceptions.Timeout()):
            with pytest.raises(AdapterError, match="timed out"):
                client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])

    def test_connection_error_raises_adapter_error(self, client):
        with patch(POST, side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(AdapterError, match="refused"):
                client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])

    def test_non_json_body_raises_adapter_error(self, client):
        with patch(POST, return_value=make_response(body=None, text="<html>")):
            with pytest.raises(AdapterError, match="Non-JSON"):
                client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])

    def test_malformed_body_raises(self, client):
        with patch(POST, return_value=make_response(body={"choices": []})):
            with pytest.raises(MalformedResponseError):
                client.call("gpt-4o-mini", [{"role": "user", "content": "hi"}])
