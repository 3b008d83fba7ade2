"""
Pytest configuration for project root.

Ensures project modules can be imported in tests.
Provides global fixtures for page images and fake completion adapters.
"""

import sys
import threading
import time
import pytest
from pathlib import Path

from PIL import Image

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from pipeline.completion import CompletionAdapter, CompletionResult


def make_page_images(directory: Path, count: int, prefix: str = "page"):
    """Write `count` small white PNGs named {prefix}_0001.png ... and return their paths."""
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for i in range(1, count + 1):
        path = directory / f"{prefix}_{i:04d}.png"
        Image.new('RGB', (60, 80), color='white').save(path)
        paths.append(path)
    return paths


class FakeAdapter(CompletionAdapter):
    """Scripted completion adapter.

    Responds "page from <stem>" unless a per-stem response, delay or error
    is configured. Records every call and the peak number of calls in flight.
    """

    def __init__(self, responses=None, delays=None, errors=None, tokens=(10, 5)):
        self.responses = responses or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.tokens = tokens
        self.calls = []
        self.model_configs = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def complete(self, image_path, prior_page, model_config):
        stem = Path(image_path).stem
        with self._lock:
            self.calls.append((stem, prior_page))
            self.model_configs.append(model_config)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get(stem, 0))
            if stem in self.errors:
                raise self.errors[stem]
            content = self.responses.get(stem, f"page from {stem}")
            return CompletionResult(content=content, input_tokens=self.tokens[0], output_tokens=self.tokens[1])
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def page_images(tmp_path):
    """Factory: page_images(count) -> list of PNG paths in a temp dir."""
    def _make(count, directory=None):
        return make_page_images(directory or tmp_path / "images", count)
    return _make


@pytest.fixture
def png_file(tmp_path):
    """A single-page PNG document."""
    path = tmp_path / "scan.png"
    Image.new('RGB', (60, 80), color='white').save(path)
    return path


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def make_adapter():
    """Factory for FakeAdapter with scripted responses, delays or errors."""
    return FakeAdapter
