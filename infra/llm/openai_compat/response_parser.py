import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass

from infra.errors import MalformedResponseError


@dataclass
class ParsedResponse:
    content: Optional[str]
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    model_used: str


class ResponseParser:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def parse_chat_completion(self, result: Dict[str, Any], model: str) -> ParsedResponse:
        try:
            content = result['choices'][0]['message']['content']
            usage = result.get('usage') or {}

            prompt_tokens = usage.get('prompt_tokens', 0)
            completion_tokens = usage.get('completion_tokens', 0)
            total_tokens = usage.get('total_tokens', prompt_tokens + completion_tokens)

            self.logger.debug(
                f"Parsed chat completion: model={model}, "
                f"content_length={len(content) if content else 0}, "
                f"prompt_tokens={prompt_tokens}, completion_tokens={completion_tokens}"
            )

            return ParsedResponse(
                content=content,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=total_tokens,
                model_used=result.get('model', model),
            )

        except (KeyError, IndexError, TypeError) as e:
            response_keys = list(result.keys()) if isinstance(result, dict) else type(result).__name__
            self.logger.error(
                f"Malformed chat completion response: model={model}, "
                f"error_type={type(e).__name__}, error={e}, response_keys={response_keys}"
            )

            raise MalformedResponseError(
                f"Malformed chat completion response: missing '{e.args[0] if e.args else 'expected key'}'"
            ) from e
