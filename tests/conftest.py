from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from config import SapSettings
from services.perf import clear_timings


class FakeSapClient:
    """Stands in for SapODataClient; answers by entity set name."""

    def __init__(self):
        self.bodies: Dict[str, Any] = {}
        self.errors: Dict[str, Exception] = {}
        self.xml: str = ""
        self.paths: List[str] = []
        self.closed = 0

    def __enter__(self) -> "FakeSapClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.closed += 1

    @staticmethod
    def entity_set(path: str) -> str:
        return path.split("?", 1)[0].split("(", 1)[0]

    def _answer(self, path: str) -> Optional[Exception]:
        self.paths.append(path)
        return self.errors.get(self.entity_set(path))

    def get_json(self, path: str) -> Any:
        error = self._answer(path)
        if error is not None:
            raise error
        return self.bodies.get(self.entity_set(path), {"d": {"results": []}})

    def get_xml(self, path: str) -> str:
        error = self._answer(path)
        if error is not None:
            raise error
        return self.xml


@pytest.fixture
def sap_settings() -> SapSettings:
    return SapSettings(base_url="https://sap.example:44300", username="portal", password="secret")


@pytest.fixture
def fake_sap(monkeypatch: pytest.MonkeyPatch) -> FakeSapClient:
    fake = FakeSapClient()
    monkeypatch.setattr("services.gateway.SapODataClient", lambda settings: fake)
    return fake


@pytest.fixture(autouse=True)
def _reset_timings():
    clear_timings()
    yield
    clear_timings()
