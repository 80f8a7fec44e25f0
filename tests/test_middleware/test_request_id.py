"""请求ID中间件测试"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from mallcore.middleware import RequestIDMiddleware, get_request_id


class TestRequestIDMiddleware:

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)

        @app.get("/echo")
        async def echo(request: Request):
            return {"state": request.state.request_id, "context": get_request_id()}

        return TestClient(app)

    def test_generated(self, client):
        response = client.get("/echo")
        data = response.json()
        assert len(data["state"]) == 32
        assert data["state"] == data["context"]
        assert response.headers["x-request-id"] == data["state"]

    def test_reuse_incoming_header(self, client):
        response = client.get("/echo", headers={"X-Request-ID": "trace-001"})
        assert response.json()["state"] == "trace-001"
        assert response.headers["x-request-id"] == "trace-001"

    def test_unique_per_request(self, client):
        ids = {client.get("/echo").json()["state"] for _ in range(5)}
        assert len(ids) == 5

    def test_context_reset_outside_request(self, client):
        client.get("/echo")
        assert get_request_id() is None
