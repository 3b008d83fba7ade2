"""
Field-list schemas for structured extraction.

A schema is a list of fields:

    [
        {"name": "invoice_number", "type": "string", "description": "..."},
        {"name": "status", "type": "enum", "values": ["paid", "due"]},
        {"name": "line_items", "type": "array", "children": [
            {"name": "description", "type": "string"},
            {"name": "amount", "type": "number"},
        ]},
    ]

array/object fields describe their members with `children`; enum fields
list their allowed `values`. Field names are unique within each level.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple

from pydantic import AfterValidator, BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from infra.errors import ConfigurationError

CONTAINER_TYPES = {"array", "object"}

FieldType = Literal["string", "number", "boolean", "enum", "array", "object"]


def _unique_names(fields: List["SchemaField"]) -> List["SchemaField"]:
    seen = set()
    for field in fields:
        if field.name in seen:
            raise ValueError(f"duplicate field name {field.name!r}")
        seen.add(field.name)
    return fields


FieldList = Annotated[List["SchemaField"], Field(min_length=1), AfterValidator(_unique_names)]


class SchemaField(BaseModel):
    name: str = Field(..., description="Key of the value in the extracted JSON")
    type: FieldType
    description: Optional[str] = Field(None, description="Hint for the model")
    values: Optional[List[str]] = Field(None, description="Allowed values (enum only)")
    children: Optional[FieldList] = Field(None, description="Member fields (array/object only)")

    @field_validator('name')
    @classmethod
    def require_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field name must not be empty")
        return v

    @model_validator(mode='after')
    def check_type_requirements(self) -> "SchemaField":
        if self.type == "enum" and not self.values:
            raise ValueError(f"{self.name}: enum fields need a non-empty 'values' list")
        if self.type in CONTAINER_TYPES and self.children is None:
            raise ValueError(f"{self.name}: {self.type} fields need a non-empty 'children' list")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


SchemaField.model_rebuild()

_FIELD_LIST = TypeAdapter(FieldList)


class ProposedSchema(BaseModel):
    """Reply format of the auto-schema request."""
    fields: FieldList


def parse_schema(schema: Any) -> List[SchemaField]:
    """
    Validate a field-list schema (list of dicts or SchemaFields).

    Raises:
        ConfigurationError: With every problem found, path-prefixed
    """
    try:
        return _FIELD_LIST.validate_python(schema)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid schema format: {', '.join(format_errors(e))}") from e


def validate_schema(schema: Any) -> Tuple[bool, List[str]]:
    """
    Check a field-list schema.

    Returns:
        (is_valid, errors) where errors are human-readable, path-prefixed
    """
    try:
        _FIELD_LIST.validate_python(schema)
    except ValidationError as e:
        return False, format_errors(e)
    return True, []


def format_errors(error: ValidationError) -> List[str]:
    """'[0].children[1].type: Input should be ...' per error."""
    messages = []
    for item in error.errors():
        path = ""
        for part in item["loc"]:
            if isinstance(part, int):
                path += f"[{part}]"
            else:
                path += f".{part}" if path else str(part)
        message = item["msg"].replace("Value error, ", "")
        messages.append(f"{path or 'schema'}: {message}")
    return messages


def to_json_schema(fields: List[SchemaField]) -> Dict[str, Any]:
    """Convert a validated field list to a strict JSON Schema object."""
    return {
        "type": "object",
        "properties": {field.name: _field_schema(field) for field in fields},
        "required": [field.name for field in fields],
        "additionalProperties": False,
    }


def _field_schema(field: SchemaField) -> Dict[str, Any]:
    if field.type == "enum":
        schema = {"type": "string", "enum": list(field.values)}
    elif field.type == "object":
        schema = to_json_schema(field.children)
    elif field.type == "array":
        schema = {"type": "array", "items": to_json_schema(field.children)}
    else:
        schema = {"type": field.type}

    if field.description:
        schema["description"] = field.description
    return schema
