import logging
import requests
from typing import Dict, Any

from infra.errors import AdapterError

logger = logging.getLogger(__name__)


class ChatCompletionsTransport:
    def __init__(self, api_key: str, base_url: str):
        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/chat/completions"

    def post(self, payload: Dict[str, Any], timeout: int = 120) -> Dict[str, Any]:
        model = payload.get('model', 'unknown')
        has_images = any(
            isinstance(msg.get('content'), list) and
            any(c.get('type') == 'image_url' for c in msg['content'])
            for msg in payload.get('messages', [])
        )

        logger.debug(
            f"Chat completion request: model={model}, timeout={timeout}, "
            f"has_images={has_images}, num_messages={len(payload.get('messages', []))}"
        )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                self.url,
                headers=headers,
                json=payload,
                timeout=timeout
            )
        except requests.exceptions.Timeout as e:
            raise AdapterError(f"Request to {self.url} timed out after {timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise AdapterError(f"Request to {self.url} failed: {e}") from e

        logger.debug(
            f"Chat completion response: model={model}, status_code={response.status_code}"
        )

        if not response.ok:
            raise AdapterError(
                f"HTTP {response.status_code} from {self.url}: {_error_detail(response)}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise AdapterError(f"Non-JSON response from {self.url}") from e


def _error_detail(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:500]

    if isinstance(data, dict) and isinstance(data.get('error'), dict):
        return data['error'].get('message') or str(data['error'])
    return str(data)[:500]
