"""Tests for CORS configuration and middleware."""

import pytest

from routedoc import CORSConfig, RestApplication, Settings, cors
from tests.framework import MultiDriverTestBase


class TestCORSConfig:
    """Test CORS configuration validation."""

    def test_defaults(self):
        config = CORSConfig()
        assert config.origins == "*"
        assert "GET" in config.methods
        assert config.max_age == 86400
        config.validate()

    def test_wildcard_with_credentials_is_rejected(self):
        with pytest.raises(ValueError, match="wildcard"):
            CORSConfig(credentials=True).validate()

    def test_negative_max_age(self):
        with pytest.raises(ValueError, match="max_age"):
            CORSConfig(max_age=-1).validate()

    def test_factory_validates(self):
        with pytest.raises(ValueError):
            cors(credentials=True)

    def test_origin_matching(self):
        config = CORSConfig(origins=["https://app.example.com"])
        assert config.allow_origin_value("https://app.example.com") == "https://app.example.com"
        assert config.allow_origin_value("https://evil.example.com") is None
        assert config.allow_origin_value(None) is None
        assert CORSConfig().allow_origin_value(None) == "*"


class TestWildcardCORS(MultiDriverTestBase):
    """Test the default wildcard configuration."""

    def create_app(self) -> RestApplication:
        app = RestApplication(Settings())
        app.use(cors())

        @app.get("/todos")
        def todos(request, response):
            return []

        return app

    def test_simple_request(self, api):
        response = api.execute(api.get("/todos").with_header("Origin", "https://site.example"))

        assert response.status_code == 200
        assert response.get_header("Access-Control-Allow-Origin") == "*"
        assert response.get_header("Access-Control-Expose-Headers") == "Content-Length, Content-Type"
        assert response.get_header("Vary") is None

    def test_preflight(self, api):
        request = (
            api.options("/todos")
            .with_header("Origin", "https://site.example")
            .with_header("Access-Control-Request-Method", "POST")
            .with_header("Access-Control-Request-Headers", "Content-Type")
        )
        response = api.execute(request)

        assert response.status_code == 204
        assert not response.body
        assert response.get_header("Access-Control-Allow-Methods") == "GET, HEAD, PUT, PATCH, POST, DELETE"
        assert response.get_header("Access-Control-Allow-Headers") == "Content-Type"
        assert response.get_header("Access-Control-Max-Age") == "86400"

    def test_plain_options_is_not_a_preflight(self, api):
        response = api.execute(api.options("/todos"))
        api.expect_not_found(response)
        assert response.get_header("Access-Control-Allow-Origin") == "*"


class TestRestrictedCORS(MultiDriverTestBase):
    """Test explicit origins with credentials."""

    def create_app(self) -> RestApplication:
        app = RestApplication(Settings())
        app.use(cors(origins=["https://app.example.com"], credentials=True, max_age=600))
        app.get("/todos", lambda request, response: [])
        return app

    def test_allowed_origin(self, api):
        response = api.execute(api.get("/todos").with_header("Origin", "https://app.example.com"))

        assert response.get_header("Access-Control-Allow-Origin") == "https://app.example.com"
        assert response.get_header("Access-Control-Allow-Credentials") == "true"
        assert response.get_header("Vary") == "Origin"

    def test_other_origin(self, api):
        response = api.execute(api.get("/todos").with_header("Origin", "https://evil.example.com"))

        assert response.status_code == 200
        assert response.get_header("Access-Control-Allow-Origin") is None

    def test_preflight_max_age(self, api):
        request = (
            api.options("/todos")
            .with_header("Origin", "https://app.example.com")
            .with_header("Access-Control-Request-Method", "GET")
        )
        response = api.execute(request)

        assert response.status_code == 204
        assert response.get_header("Access-Control-Max-Age") == "600"
        assert "Authorization" in response.get_header("Access-Control-Allow-Headers")
