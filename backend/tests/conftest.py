from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from tests.utils.generator import FakeIdeaGenerator
from tests.utils.store import InMemoryTableStore


@pytest.fixture()
def store() -> InMemoryTableStore:
    return InMemoryTableStore()


@pytest.fixture()
def generator() -> FakeIdeaGenerator:
    return FakeIdeaGenerator()


@pytest.fixture()
def client(
    store: InMemoryTableStore, generator: FakeIdeaGenerator
) -> Generator[TestClient, None, None]:
    app = create_app(store=store, generator=generator)
    with TestClient(app, follow_redirects=False) as c:
        yield c
