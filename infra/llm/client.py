"""
Chat-completion client for OpenAI-compatible endpoints.

Composes transport and parsing layers:
- ChatCompletionsTransport: HTTP requests
- ResponseParser: Response extraction and malformed handling

No retries happen here. A failed request raises AdapterError and the caller
decides what a failure means for the run.
"""

from typing import Dict, List, Optional, Tuple

from infra.config import Config
from infra.llm.models import LLMParams
from infra.llm.openai_compat import (
    ChatCompletionsTransport,
    ResponseParser,
    add_images_to_messages,
)


class LLMClient:
    """
    Makes chat-completion calls and returns (content, usage).

    Holds only immutable settings, so one instance can be shared by
    several worker threads.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Args:
            api_key: Bearer token (default: Config.openai_api_key)
            base_url: API root (default: Config.base_url)
            timeout: Request timeout in seconds (default: Config.request_timeout)
        """
        self.transport = ChatCompletionsTransport(
            api_key=api_key if api_key is not None else Config.openai_api_key,
            base_url=base_url or Config.base_url,
        )
        self.parser = ResponseParser()
        self.timeout = timeout or Config.request_timeout

    def call(
        self,
        model: str,
        messages: List[Dict],
        llm_params: Optional[LLMParams] = None,
        response_format: Optional[Dict] = None,
        images: Optional[List] = None,
    ) -> Tuple[str, Dict[str, int]]:
        """
        Make a chat-completion call.

        Args:
            model: Model name (e.g., "gpt-4o-mini")
            messages: List of message dicts with 'role' and 'content'
            llm_params: Optional sampling parameters
            response_format: Optional structured output schema
                           Use {"type": "json_schema", "json_schema": {...}} for guaranteed JSON
            images: Optional PIL Images or image paths, attached to the last user message

        Returns:
            Tuple of (response_text, usage) where usage has
            'prompt_tokens' and 'completion_tokens'

        Raises:
            AdapterError: On transport failure or malformed response
        """
        payload = {
            "model": model,
            "messages": messages,
        }

        if llm_params is not None:
            payload.update(llm_params.to_payload())

        if response_format:
            payload["response_format"] = response_format

        if images:
            payload["messages"] = add_images_to_messages(messages, images)

        result = self.transport.post(payload, self.timeout)
        parsed = self.parser.parse_chat_completion(result, model)

        usage = {
            "prompt_tokens": parsed.prompt_tokens,
            "completion_tokens": parsed.completion_tokens,
        }
        return parsed.content or "", usage

    def simple_call(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        **kwargs
    ) -> Tuple[str, Dict[str, int]]:
        """Call with one system and one user message."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        return self.call(model, messages, **kwargs)
