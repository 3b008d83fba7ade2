from pathlib import Path
from urllib.parse import unquote, urlparse

SUPPORTED_EXTENSIONS = {".pdf", ".png", ".jpg", ".jpeg", ".txt", ".docx", ".html"}


def is_valid_file(file: str) -> bool:
    """True if the path or URL ends in a supported document extension."""
    if not file:
        return False
    path = unquote(urlparse(file).path) if "://" in file else file
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS
