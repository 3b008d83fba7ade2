from infra.config import Config, ScribeConfig
from infra.errors import (
    ScribeError,
    ConfigurationError,
    ConversionError,
    AdapterError,
    MalformedResponseError,
    ExtractionError,
)
from infra.llm import LLMClient, LLMParams, ModelOptions
from infra.logger import ScribeLogger, create_logger

__all__ = [
    "Config",
    "ScribeConfig",

    "ScribeError",
    "ConfigurationError",
    "ConversionError",
    "AdapterError",
    "MalformedResponseError",
    "ExtractionError",

    "LLMClient",
    "LLMParams",
    "ModelOptions",

    "ScribeLogger",
    "create_logger",
]
