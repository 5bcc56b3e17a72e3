import pytest
from fastapi.testclient import TestClient

URL = "/api/auth/callback"


def test_callback_defaults_to_dashboard(client: TestClient) -> None:
    r = client.get(URL, params={"code": "abc"})
    assert r.status_code == 307
    assert r.headers["location"] == "/dashboard"


def test_callback_follows_local_redirect(client: TestClient) -> None:
    r = client.get(URL, params={"redirect": "/idea/42"})
    assert r.status_code == 307
    assert r.headers["location"] == "/idea/42"


@pytest.mark.parametrize(
    "target", ["https://evil.example", "//evil.example", "idea/42", "/\\evil.example"]
)
def test_callback_rejects_external_redirect(client: TestClient, target: str) -> None:
    r = client.get(URL, params={"redirect": target})
    assert r.status_code == 307
    assert r.headers["location"] == "/dashboard"
