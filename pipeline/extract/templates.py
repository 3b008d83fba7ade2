import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from infra.errors import ConfigurationError

TEMPLATES_DIR = Path(__file__).parent / "templates"


def list_templates() -> List[str]:
    return sorted(path.stem for path in TEMPLATES_DIR.glob("*.json"))


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    return (TEMPLATES_DIR / f"{name}.json").read_text(encoding="utf-8")


def get_template(name: str) -> List[Dict[str, Any]]:
    """
    Load a built-in field schema by name.

    Raises:
        ConfigurationError: If no template has that name
    """
    if name not in list_templates():
        raise ConfigurationError(
            f"Unknown template {name!r}. Available: {', '.join(list_templates())}"
        )
    return json.loads(_load_template(name))
