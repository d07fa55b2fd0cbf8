"""Shared test fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from youless_exporter.backends.base import Backend, Reading
from youless_exporter.frontends.prometheus import PrometheusFrontend


class MockBackend(Backend):
    """A backend that returns a configurable reading and counts fetches."""

    def __init__(self, reading: Reading | None = None) -> None:
        self._reading = reading or self._default_reading()
        self.fetch_count = 0

    @staticmethod
    def _default_reading() -> Reading:
        return Reading(
            timestamp=1575316361,
            net_counter=1133.932,
            power=431,
            s0_timestamp=1535271600,
            s0_counter=0.0,
            s0_power=0,
            p1=4590.448,
            p2=4315.399,
            n1=2320.876,
            n2=5451.039,
            gas=2878.709,
            gas_timestamp=1912022000,
        )

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    def fetch(self) -> Reading:
        self.fetch_count += 1
        return self._reading

    def set_reading(self, reading: Reading) -> None:
        self._reading = reading


@pytest.fixture
def mock_backend():
    return MockBackend()


@pytest.fixture
def frontend(mock_backend):
    return PrometheusFrontend(mock_backend, {})


@pytest.fixture
def client(frontend):
    """FastAPI test client with a Prometheus frontend (no lifespan)."""
    test_app = FastAPI()
    test_app.include_router(frontend.get_router())
    with TestClient(test_app) as c:
        yield c
