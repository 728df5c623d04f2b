import logging
import os
import sys
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Ensure the app package is importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Avoid startup validation error when importing the app
os.environ.setdefault("ALLOW_CREDENTIALS", "false")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
from app.exceptions import InvalidScoreError
from app.main import domain_exception_handler, unhandled_exception_handler


def test_unhandled_exception_logs_traceback(caplog):
    app = FastAPI()
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/boom")
    def boom():
        raise ValueError("boom")

    client = TestClient(app, raise_server_exceptions=False)
    with caplog.at_level(logging.ERROR):
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "internal_server_error"
    record = next((r for r in caplog.records if r.message == "Unhandled exception"), None)
    assert record is not None
    assert record.exc_info[0] is ValueError
    assert "ValueError: boom" in caplog.text


def test_domain_errors_render_problem_details():
    app = FastAPI()
    app.add_exception_handler(InvalidScoreError, domain_exception_handler)

    @app.get("/bad-score")
    def bad_score():
        raise InvalidScoreError("loserPoints must be between 0 and 7")

    client = TestClient(app)
    response = client.get("/bad-score")

    assert response.status_code == 422
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["code"] == "invalid_score"
    assert body["title"] == "Invalid score"
    assert body["detail"] == "loserPoints must be between 0 and 7"
