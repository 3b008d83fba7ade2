"""
OpenAI-compatible chat completions API components.

Clean separation of concerns:
- transport.py: HTTP requests
- response_parser.py: Response parsing
- images.py: Page image encoding into multipart messages
"""

from .transport import ChatCompletionsTransport
from .response_parser import ResponseParser, ParsedResponse
from .images import add_images_to_messages, encode_image

__all__ = [
    'ChatCompletionsTransport',
    'ResponseParser',
    'ParsedResponse',
    'add_images_to_messages',
    'encode_image',
]
