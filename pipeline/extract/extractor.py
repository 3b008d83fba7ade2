"""
Structured extraction: document → markdown (via scribe) → JSON matching a field schema.

The schema comes from exactly one of: a built-in template, a caller-supplied
field list, or (auto_schema) a schema the model proposes after reading the
document. A transcription that lost pages still yields data, but the result
has success=False and lists the missing pages.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from infra.config import Config
from infra.errors import ConfigurationError, ExtractionError, MalformedResponseError
from infra.llm import LLMClient
from infra.logger import create_logger
from pipeline.extract.file_validator import is_valid_file
from pipeline.extract.prompts import AUTO_SCHEMA_SYSTEM_PROMPT, EXTRACT_SYSTEM_PROMPT
from pipeline.extract.schema_validator import (
    ProposedSchema,
    SchemaField,
    format_errors,
    parse_schema,
    to_json_schema,
)
from pipeline.extract.templates import get_template
from pipeline.transcribe import scribe

logger = logging.getLogger(__name__)

_EXTRACTED_DATA = TypeAdapter(Dict[str, Any])


class ExtractionResult(BaseModel):
    success: bool
    pages: int
    data: Dict[str, Any]
    file_name: str
    fields: List[Dict[str, Any]]
    failed_pages: List[int] = Field(default_factory=list, description="Pages missing from the transcription")
    error: Optional[str] = Field(None, description="Why pages are missing, when they are")


def extract(
    file: str,
    schema: Optional[List[Dict[str, Any]]] = None,
    template: Optional[str] = None,
    model: Optional[str] = None,
    parse_model: Optional[str] = None,
    auto_schema: bool = False,
    additional_prompt: Optional[str] = None,
    api_key: Optional[str] = None,
    client: Optional[LLMClient] = None,
    **scribe_options,
) -> ExtractionResult:
    """
    Extract structured data from a document.

    Args:
        file: Local path or URL (pdf, png, jpg, jpeg, txt, docx, html)
        schema: Field list (see schema_validator)
        template: Built-in template name; takes precedence over schema
        model: Vision model for transcription (default: VISION_MODEL)
        parse_model: Model for extraction (default: model)
        auto_schema: Let the model propose the schema when none is given
        additional_prompt: Extra instructions appended to the extraction prompt
        api_key: Completions API key (default: OPENAI_API_KEY)
        client: LLMClient for the extraction calls
        **scribe_options: Passed through to scribe()

    Returns:
        ExtractionResult; success is False when the transcription was partial

    Raises:
        ExtractionError: On any failure, chained to the root cause
    """
    try:
        if not file:
            raise ConfigurationError("File is required.")

        if not is_valid_file(file):
            raise ConfigurationError(
                "File must be a valid format: PDF, PNG, JPG, TXT, DOCX, or HTML."
            )

        fields = None
        if template:
            fields = parse_schema(get_template(template))
        elif schema is not None:
            fields = parse_schema(schema)
        elif not auto_schema:
            raise ConfigurationError(
                "You must provide a schema, template, or enable auto_schema."
            )

        if additional_prompt is not None and not isinstance(additional_prompt, str):
            raise ConfigurationError("Additional prompt must be a string.")

        api_key = api_key if api_key is not None else Config.openai_api_key
        model = model or Config.vision_model
        parse_model = parse_model or model

        output = scribe(file, api_key=api_key, model=model, **scribe_options)
        client = client or LLMClient(api_key=api_key)

        log_dir = scribe_options.get("log_dir") or Config.log_dir
        with create_logger(output.file_name, "extract", log_dir=log_dir) as run_logger:
            if output.status != "success":
                run_logger.warning(
                    f"Extracting from a partial transcription, missing pages {output.failed_pages}",
                    error=output.error,
                )

            if fields is None:
                fields = generate_schema(client, output.markdown, parse_model)
                run_logger.info(f"Generated schema with {len(fields)} fields")

            data = extract_data(client, output.markdown, fields, parse_model, additional_prompt)
            run_logger.info(f"Extracted {len(data)} fields from {len(output.pages)} pages")

        return ExtractionResult(
            success=output.status == "success",
            pages=len(output.pages),
            data=data,
            file_name=output.file_name,
            fields=[field.to_dict() for field in fields],
            failed_pages=output.failed_pages,
            error=output.error,
        )

    except ExtractionError:
        raise
    except Exception as e:
        logger.error(f"Error processing document {file}: {e}")
        raise ExtractionError(f"Failed to process document: {e}") from e


def generate_schema(client: LLMClient, markdown: str, model: str) -> List[SchemaField]:
    """Ask the model to propose a field schema for the document."""
    content, _ = client.simple_call(
        model,
        AUTO_SCHEMA_SYSTEM_PROMPT,
        markdown,
        response_format={"type": "json_object"},
    )

    try:
        proposed = ProposedSchema.model_validate_json(content)
    except ValidationError as e:
        raise ExtractionError(f"Generated schema is invalid: {', '.join(format_errors(e))}") from e

    return proposed.fields


def extract_data(
    client: LLMClient,
    markdown: str,
    fields: List[SchemaField],
    model: str,
    additional_prompt: Optional[str] = None,
) -> Dict[str, Any]:
    system_prompt = EXTRACT_SYSTEM_PROMPT
    if additional_prompt:
        system_prompt = f"{system_prompt}\n\n{additional_prompt}"

    response_format = {
        "type": "json_schema",
        "json_schema": {
            "name": "extraction",
            "strict": True,
            "schema": to_json_schema(fields),
        },
    }

    content, _ = client.simple_call(model, system_prompt, markdown, response_format=response_format)

    try:
        return _EXTRACTED_DATA.validate_json(content)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Extraction response is not a JSON object: {', '.join(format_errors(e))}"
        ) from e
