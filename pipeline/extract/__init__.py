from pipeline.extract.extractor import ExtractionResult, extract, extract_data, generate_schema
from pipeline.extract.file_validator import is_valid_file
from pipeline.extract.schema_validator import (
    ProposedSchema,
    SchemaField,
    parse_schema,
    to_json_schema,
    validate_schema,
)
from pipeline.extract.templates import get_template, list_templates

__all__ = [
    "ExtractionResult",
    "extract",
    "extract_data",
    "generate_schema",
    "is_valid_file",
    "ProposedSchema",
    "SchemaField",
    "parse_schema",
    "to_json_schema",
    "validate_schema",
    "get_template",
    "list_templates",
]
