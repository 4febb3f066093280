"""Tests for the fluent route builder."""

from typing import List, Optional

import pytest
from pydantic import BaseModel

from routedoc import BuiltRoute, RouteBuilder, RouteConfigurationError, RouteMeta, endpoint


class Todo(BaseModel):
    title: str
    description: Optional[str] = None
    done: Optional[bool] = None


class Page(BaseModel):
    page: int = 1


class TodoId(BaseModel):
    id: int


def handler(request, response):
    return {"ok": True}


class TestRouteMeta:
    """Test metadata parsing."""

    def test_title_is_required(self):
        with pytest.raises(RouteConfigurationError):
            endpoint(handler).set_meta(description="no title")

    def test_accepts_keywords(self):
        route = endpoint(handler).set_meta(title="list TODOs", tags=["todos"]).build()
        assert route.schema.meta.title == "list TODOs"
        assert route.schema.meta.tags == ("todos",)

    def test_accepts_camel_case_mapping(self):
        route = endpoint(handler).set_meta(
            {"title": "create TODO", "responseDescription": "Created", "errorDescription": "Malformed"}
        ).build()
        assert route.schema.meta.response_description == "Created"
        assert route.schema.meta.error_description == "Malformed"

    def test_accepts_meta_object(self):
        meta = RouteMeta(title="read TODO", deprecated=True)
        assert endpoint(handler).set_meta(meta).build().schema.meta is meta

    def test_rejects_unknown_fields(self):
        with pytest.raises(RouteConfigurationError, match="invalid route metadata"):
            endpoint(handler).set_meta(title="x", summary="unknown")

    def test_rejects_object_and_keywords_together(self):
        with pytest.raises(RouteConfigurationError):
            endpoint(handler).set_meta(RouteMeta(title="x"), title="y")

    def test_omitted_fields_are_none(self):
        meta = endpoint(handler).set_meta(title="x").build().schema.meta
        assert meta.description is None
        assert meta.tags is None
        assert meta.deprecated is None


class TestDuplicateConfiguration:
    """Every setter may only be used once."""

    def test_duplicate_meta(self):
        builder = endpoint(handler).set_meta(title="first")
        with pytest.raises(RouteConfigurationError, match="metadata is already defined"):
            builder.set_meta(title="second")

    @pytest.mark.parametrize("setter", [
        "set_request_body_schema",
        "set_query_schema",
        "set_params_schema",
        "set_response_schema",
    ])
    def test_duplicate_schema(self, setter):
        builder = endpoint(handler)
        getattr(builder, setter)(Todo)
        with pytest.raises(RouteConfigurationError, match="already defined: Todo"):
            getattr(builder, setter)(Page)

    def test_duplicate_schema_after_other_setters(self):
        builder = endpoint(handler).set_query_schema(Page)
        builder.set_meta(title="x").set_response_schema(Todo)
        with pytest.raises(RouteConfigurationError):
            builder.set_query_schema(Page)

    def test_duplicate_through_schema_shortcut(self):
        builder = endpoint(handler).schema(body=Todo)
        with pytest.raises(RouteConfigurationError):
            builder.set_request_body_schema(Todo)

    def test_duplicate_handler(self):
        builder = endpoint(handler)
        with pytest.raises(RouteConfigurationError, match="add_middleware"):
            builder.set_handler(handler)


class TestBuild:
    """Test finalizing a route."""

    def test_missing_handler(self):
        with pytest.raises(RouteConfigurationError, match="handler"):
            RouteBuilder().set_meta(title="x").build()

    def test_missing_meta(self):
        with pytest.raises(RouteConfigurationError, match="meta"):
            endpoint(handler).build()

    def test_minimal_route_is_just_the_handler(self):
        route = endpoint(handler).set_meta(title="x").build()
        assert isinstance(route, BuiltRoute)
        assert route.steps == ()
        assert list(route) == [handler]
        assert len(route) == 1

    def test_step_order(self):
        def audit(request, response):
            pass

        route = (
            endpoint()
            .add_middleware(audit)
            .set_response_schema(Todo)
            .set_params_schema(TodoId)
            .set_query_schema(Page)
            .set_request_body_schema(Todo)
            .set_handler(handler)
            .set_meta(title="x")
            .build()
        )
        names = [step.__name__ for step in route.steps]
        assert names == [
            "validate_json_body",
            "validate_query_params",
            "validate_path_params",
            "validate_response_body",
            "audit",
        ]
        assert list(route)[-1] is handler

    def test_schema_records_declared_schemas(self):
        route = (
            endpoint(handler)
            .set_meta(title="x")
            .schema(body=Todo, query=Page, params=TodoId, response=List[Todo])
            .build()
        )
        assert route.schema.body_schema is Todo
        assert route.schema.query_schema is Page
        assert route.schema.params_schema is TodoId
        assert route.schema.response_schema == List[Todo]
        assert len(route.schema.middleware) == 4

    def test_second_build_returns_same_route(self):
        builder = endpoint(handler).set_meta(title="x").set_response_schema(Todo)
        first = builder.build()
        assert builder.build() is first

    def test_builder_is_frozen_after_build(self):
        builder = endpoint(handler).set_meta(title="x")
        built = builder.build()
        with pytest.raises(RouteConfigurationError, match="already built"):
            builder.set_request_body_schema(Todo)
        with pytest.raises(RouteConfigurationError):
            builder.add_middleware(handler)
        assert builder.build() is built
        assert built.schema.body_schema is None
