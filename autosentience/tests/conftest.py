"""Shared pytest fixtures for AutoSentience tests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Union

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from autosentience import models_db  # noqa: F401  (registers tables)
from autosentience.db.base import Base
from autosentience.exceptions import InferenceError
from autosentience.inference.client import InferenceService
from autosentience.rules import detector
from autosentience.schemas import SensorSnapshot
from autosentience.store.sql import SqlStore

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"

Scripted = Union[str, Exception]


# ---------------------------------------------------------------------------
# Inference fakes
# ---------------------------------------------------------------------------


@dataclass
class InferenceCall:
    prompt: str
    system_prompt: str
    temperature: float


class FakeInference(InferenceService):
    """Returns scripted text keyed by system prompt.

    Prompts without a scripted answer (and no *default*) raise
    :class:`InferenceError`, the same as an exhausted retry budget.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Scripted]] = None,
        default: Optional[Scripted] = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.calls: List[InferenceCall] = []

    async def infer(self, prompt: str, system_prompt: str, temperature: float) -> str:
        self.calls.append(InferenceCall(prompt, system_prompt, temperature))
        response = self.responses.get(system_prompt, self.default)
        if response is None:
            raise InferenceError("backend unavailable")
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def make_inference():
    """Factory: ``make_inference(responses={SYSTEM_PROMPT: text}, default=...)``."""
    return FakeInference


@pytest.fixture()
def failing_inference() -> FakeInference:
    return FakeInference()


# ---------------------------------------------------------------------------
# Sensor data
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_rules_cache() -> Generator[None, None, None]:
    """Reload the bundled rule table for every test."""
    detector._default_rules_cache = None
    yield
    detector._default_rules_cache = None


@pytest.fixture()
def sample_snapshot_dict() -> Dict[str, Any]:
    """Load the canonical healthy snapshot as a plain dict."""
    path = _FIXTURES_DIR / "sensor_snapshot.sample.json"
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture()
def healthy_snapshot(sample_snapshot_dict: Dict[str, Any]) -> SensorSnapshot:
    return SensorSnapshot.model_validate({**sample_snapshot_dict, "id": "reading-1"})


@pytest.fixture()
def overheating_snapshot(sample_snapshot_dict: Dict[str, Any]) -> SensorSnapshot:
    """engine_temp=125 fires ENGINE_TEMP_HIGH and ENGINE_TEMP_ELEVATED."""
    return SensorSnapshot.model_validate(
        {**sample_snapshot_dict, "id": "reading-2", "engine_temp": 125.0, "battery_voltage": 13.5}
    )


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def store(db_session: Session) -> SqlStore:
    return SqlStore(db_session)
