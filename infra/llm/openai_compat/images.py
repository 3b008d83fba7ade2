import base64
import io
import logging
from pathlib import Path
from typing import List, Dict, Union

from PIL import Image

logger = logging.getLogger(__name__)

JPEG_QUALITY = 85


def encode_image(image: Union[Image.Image, Path, str]) -> str:
    """Encode a page image (PIL Image or file path) as a JPEG data URL."""
    if isinstance(image, (str, Path)):
        with Image.open(image) as opened:
            return encode_image(opened.convert("RGB"))

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buffered = io.BytesIO()
    image.save(buffered, format="JPEG", quality=JPEG_QUALITY)
    img_b64 = base64.b64encode(buffered.getvalue()).decode('utf-8')
    return f"data:image/jpeg;base64,{img_b64}"


def add_images_to_messages(messages: List[Dict], images: List) -> List[Dict]:
    """Attach images to the last user message in multipart format."""
    user_msg_idx = None
    for i in range(len(messages) - 1, -1, -1):
        if messages[i]['role'] == 'user':
            user_msg_idx = i
            break

    if user_msg_idx is None:
        raise ValueError("No user message found to attach images to")

    original_content = messages[user_msg_idx]['content']

    if isinstance(original_content, list):
        content = original_content.copy()
    elif original_content:
        content = [{"type": "text", "text": original_content}]
    else:
        content = []

    for img in images:
        content.append({
            "type": "image_url",
            "image_url": {"url": encode_image(img)}
        })

    messages = messages.copy()
    messages[user_msg_idx] = messages[user_msg_idx].copy()
    messages[user_msg_idx]['content'] = content

    logger.debug(
        f"Attached {len(images)} images to user message {user_msg_idx} "
        f"({len(content)} content parts)"
    )

    return messages
