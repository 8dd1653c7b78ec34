from __future__ import annotations

import os
import random
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from guessgame.api.models import Item
from guessgame.config import Settings
from guessgame.engine import SessionEngine
from guessgame.pool.registry import ItemPool, load_item_pool
from guessgame.runtime import SessionRuntime, build_runtime

TESTS_ROOT = Path(__file__).resolve().parent

CAT = Item(id="1", answer="cat", image="images/cat.png")
DOG = Item(id="2", answer="dog", image="images/dog.png")


@pytest.fixture(scope="session", autouse=True)
def _init_runtime_from_test_fixtures() -> Generator[None, None, None]:
    """Initialize the app runtime from `tests/assets` and forbid the bundled fallback pool.

    This keeps tests hermetic; the startup hook then finds the runtime already built.
    """

    os.environ["GUESSGAME_STRICT_POOL"] = "1"

    from guessgame.pool.singleton import reset_pool_for_tests
    from guessgame.runtime import init_runtime, reset_runtime_for_tests

    reset_pool_for_tests()
    reset_runtime_for_tests()
    init_runtime(project_root=TESTS_ROOT, settings=Settings(seed=7, server_ticker=False))
    yield
    reset_runtime_for_tests()
    reset_pool_for_tests()


@pytest.fixture()
def pet_engine() -> SessionEngine:
    return SessionEngine(pool=[CAT, DOG], rng=random.Random(1234))


@pytest.fixture()
def test_pool() -> ItemPool:
    return load_item_pool(root=TESTS_ROOT)


def _client_for(runtime: SessionRuntime) -> Generator[TestClient, None, None]:
    from guessgame.api.deps import get_session_runtime
    from guessgame.main import app

    app.dependency_overrides[get_session_runtime] = lambda: runtime
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def runtime(test_pool: ItemPool) -> SessionRuntime:
    return build_runtime(pool=test_pool, settings=Settings(seed=3, server_ticker=False))


@pytest.fixture()
def client(runtime: SessionRuntime) -> Generator[TestClient, None, None]:
    yield from _client_for(runtime)


@pytest.fixture()
def strict_client(test_pool: ItemPool) -> Generator[TestClient, None, None]:
    rt = build_runtime(pool=test_pool, settings=Settings(seed=3, server_ticker=False, strict_transitions=True))
    yield from _client_for(rt)


@pytest.fixture()
def empty_pool_client() -> Generator[TestClient, None, None]:
    rt = build_runtime(pool=ItemPool.from_rows([]), settings=Settings(server_ticker=False))
    yield from _client_for(rt)


@pytest.fixture()
def ticking_client(test_pool: ItemPool) -> Generator[TestClient, None, None]:
    rt = build_runtime(pool=test_pool, settings=Settings(seed=3, server_ticker=True, tick_interval=0.3))
    yield from _client_for(rt)
