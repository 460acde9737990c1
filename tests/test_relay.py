"""
Testes para o relay HTTP (FastAPI).
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from autoapi.relay import RelayConfig, create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(RelayConfig(timeout=5.0)))


def target_response(status=200, body=b'{"ok": true}', reason="OK", headers=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.reason = reason
    response.content = body
    response.text = body.decode("utf-8")
    response.headers = headers or {"Content-Type": "application/json"}
    try:
        response.json.return_value = json.loads(body)
    except ValueError:
        response.json.side_effect = ValueError("not json")
    return response


class TestProxy:
    """POST /proxy e /api/proxy."""

    @pytest.mark.parametrize("path", ["/proxy", "/api/proxy"])
    @patch("autoapi.relay.app.requests.request")
    def test_forwards_request(self, mock_request, client, path):
        mock_request.return_value = target_response(201, b'{"id": 1}', reason="Created")

        response = client.post(path, json={
            "targetUrl": "https://api.example.com/users",
            "method": "post",
            "headers": {"Content-Type": "application/json"},
            "body": {"name": "Ana"},
        })

        assert response.status_code == 200
        envelope = response.json()
        assert envelope["status"] == 201
        assert envelope["statusText"] == "Created"
        assert envelope["data"] == {"id": 1}
        assert envelope["headers"]["content-type"] == "application/json"

        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://api.example.com/users")
        assert json.loads(kwargs["data"]) == {"name": "Ana"}
        assert kwargs["timeout"] == 5.0

    @patch("autoapi.relay.app.requests.request")
    def test_target_error_status_is_returned_as_200(self, mock_request, client):
        mock_request.return_value = target_response(404, b"Not Found", reason="Not Found",
                                                     headers={"Content-Type": "text/plain"})

        response = client.post("/proxy", json={"targetUrl": "https://api.example.com/x"})

        assert response.status_code == 200
        assert response.json()["status"] == 404
        assert response.json()["data"] == "Not Found"

    @patch("autoapi.relay.app.requests.request")
    def test_absent_body_not_sent(self, mock_request, client):
        mock_request.return_value = target_response()

        client.post("/proxy", json={"targetUrl": "https://api.example.com/x", "method": "GET"})

        assert mock_request.call_args.kwargs["data"] is None

    @patch("autoapi.relay.app.requests.request")
    def test_network_error_returns_502(self, mock_request, client):
        mock_request.side_effect = requests.ConnectionError("ECONNREFUSED")

        response = client.post("/proxy", json={"targetUrl": "http://localhost:1/x"})

        assert response.status_code == 502
        envelope = response.json()
        assert envelope["status"] == 0
        assert envelope["statusText"] == "Proxy Network Error"
        assert "ECONNREFUSED" in envelope["error"]
        assert envelope["data"] is None

    def test_missing_target_url(self, client):
        response = client.post("/proxy", json={"method": "GET"})
        assert response.status_code == 422


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRelayConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AUTOAPI_RELAY_PORT", "4000")
        monkeypatch.setenv("AUTOAPI_RELAY_CORS_ORIGINS", "http://a, http://b")
        config = RelayConfig.from_env()
        assert config.port == 4000
        assert config.cors_origins == ["http://a", "http://b"]
        assert config.timeout is None
