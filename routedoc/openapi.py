"""
OpenAPI document generation from introspected routes.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, TypeAdapter

from .builder import RouteSchema
from .error_models import ErrorResponse
from .introspection import RouteSource, list_routes
from .router import Router

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.3"
DEFAULT_INFO = {"title": "API", "version": "0.0.1"}
REF_TEMPLATE = "#/components/schemas/{model}"
JSON_CONTENT_TYPE = "application/json"


def _is_pydantic_model(schema: Any) -> bool:
    """Check if the schema is a Pydantic model class."""
    return isinstance(schema, type) and issubclass(schema, BaseModel)


def convert_json_schema(schema: Any) -> Any:
    """Convert Pydantic JSON schema to OpenAPI 3.0 compliant schema."""
    if not isinstance(schema, dict):
        return schema

    converted: Dict[str, Any] = {}
    for key, value in schema.items():
        if key == "anyOf" and isinstance(value, list):
            # Handle anyOf patterns for optional fields
            converted.update(_convert_anyof_to_nullable(value))
        elif key == "exclusiveMinimum" and isinstance(value, (int, float)) and not isinstance(value, bool):
            # Convert exclusiveMinimum from number to boolean + minimum
            converted["minimum"] = value
            converted["exclusiveMinimum"] = True
        elif key == "exclusiveMaximum" and isinstance(value, (int, float)) and not isinstance(value, bool):
            # Convert exclusiveMaximum from number to boolean + maximum
            converted["maximum"] = value
            converted["exclusiveMaximum"] = True
        elif isinstance(value, dict):
            converted[key] = convert_json_schema(value)
        elif isinstance(value, list):
            converted[key] = [convert_json_schema(item) for item in value]
        else:
            converted[key] = value
    return converted


def _convert_anyof_to_nullable(anyof_list: List[Any]) -> Dict[str, Any]:
    """Convert anyOf with null to nullable field for OpenAPI 3.0."""
    non_null = [item for item in anyof_list if not (isinstance(item, dict) and item.get("type") == "null")]
    if len(anyof_list) == 2 and len(non_null) == 1 and isinstance(non_null[0], dict):
        result = convert_json_schema(non_null[0])
        result["nullable"] = True
        return result

    # If it's not the nullable pattern, keep as anyOf but convert each schema
    return {"anyOf": [convert_json_schema(item) for item in anyof_list]}


class SchemaCollector:
    """Projects schemas and keeps the named ones for ``components.schemas``."""

    def __init__(self):
        self.schemas: Dict[str, Dict[str, Any]] = {}

    def _json_schema(self, schema: Any) -> Dict[str, Any]:
        if _is_pydantic_model(schema):
            json_schema = schema.model_json_schema(ref_template=REF_TEMPLATE)
        else:
            json_schema = TypeAdapter(schema).json_schema(ref_template=REF_TEMPLATE)
        for name, definition in json_schema.pop("$defs", {}).items():
            self._register(name, convert_json_schema(definition))
        return json_schema

    def _register(self, name: str, definition: Dict[str, Any]) -> None:
        """Keep the first definition under ``name``; warn if a different one shows up."""
        existing = self.schemas.setdefault(name, definition)
        if existing != definition:
            logger.warning(
                f"Two different schemas are named {name!r}; "
                f"#/components/schemas/{name} keeps the first one"
            )

    def project(self, schema: Any) -> Dict[str, Any]:
        """Project a schema, returning a ``$ref`` for named models."""
        if _is_pydantic_model(schema):
            name = schema.__name__
            self._register(name, convert_json_schema(self._json_schema(schema)))
            return {"$ref": REF_TEMPLATE.format(model=name)}
        return convert_json_schema(self._json_schema(schema))

    def parameters(self, location: str, schema: Any) -> List[Dict[str, Any]]:
        """Project the fields of an object schema into OpenAPI parameters."""
        if schema is None:
            return []
        json_schema = self._json_schema(schema)
        required = set(json_schema.get("required", []))
        return [
            {
                "in": location,
                "name": name,
                "schema": convert_json_schema(field_schema),
                "required": name in required,
            }
            for name, field_schema in (json_schema.get("properties") or {}).items()
        ]


def schema_to_openapi(schema: Any, collector: Optional[SchemaCollector] = None) -> Dict[str, Any]:
    """Project a single schema into an OpenAPI schema object."""
    return (collector or SchemaCollector()).project(schema)


def schema_to_parameters(
    location: str, schema: Any, collector: Optional[SchemaCollector] = None
) -> List[Dict[str, Any]]:
    """Project an object schema into ``in: location`` parameters."""
    return (collector or SchemaCollector()).parameters(location, schema)


ERROR_RESPONSE_SCHEMA = convert_json_schema(ErrorResponse.model_json_schema())


def _json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {JSON_CONTENT_TYPE: {"schema": schema}}


def _operation(route_schema: RouteSchema, collector: SchemaCollector) -> Dict[str, Any]:
    """Build the operation object for one route."""
    meta = route_schema.meta
    operation: Dict[str, Any] = {"summary": meta.title}
    if meta.description is not None:
        operation["description"] = meta.description
    if meta.tags is not None:
        operation["tags"] = list(meta.tags)
    if meta.deprecated is not None:
        operation["deprecated"] = meta.deprecated

    operation["parameters"] = collector.parameters("query", route_schema.query_schema) + collector.parameters(
        "path", route_schema.params_schema
    )

    if route_schema.body_schema is not None:
        operation["requestBody"] = {"content": _json_content(collector.project(route_schema.body_schema))}

    responses: Dict[str, Any] = {}
    if route_schema.response_schema is not None:
        responses["200"] = {
            "description": meta.response_description or "Successful response",
            "content": _json_content(collector.project(route_schema.response_schema)),
        }
    responses["400"] = {
        "description": meta.error_description or "Malformed request",
        "content": _json_content(ERROR_RESPONSE_SCHEMA),
    }
    operation["responses"] = responses
    return operation


def generate_documentation(
    source: Union[Router, RouteSource], info: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Generate an OpenAPI document from the routes registered on ``source``.

    Only routes built with ``RouteBuilder`` carry the metadata needed here;
    every other handler is left out of the document.
    """
    collector = SchemaCollector()
    paths: Dict[str, Dict[str, Any]] = {}

    for route in list_routes(source):
        path = route.path if route.path.startswith("/") else "/" + route.path
        paths.setdefault(path, {})[route.method.value.lower()] = _operation(route.schema, collector)

    document: Dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": dict(info) if info is not None else dict(DEFAULT_INFO),
        "paths": paths,
    }
    # Add components section if we have collected schemas
    if collector.schemas:
        document["components"] = {"schemas": collector.schemas}
    return document
