"""FastAPI dependencies: DB session, store, inference client, settings."""

from functools import lru_cache
from typing import Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from autosentience.config import Settings, settings
from autosentience.db.session import SessionLocal
from autosentience.inference.client import InferenceClient, InferenceService
from autosentience.store.base import Store
from autosentience.store.sql import SqlStore


def get_settings() -> Settings:
    return settings


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> Store:
    return SqlStore(db)


@lru_cache(maxsize=1)
def _inference_client() -> InferenceClient:
    return InferenceClient.from_settings(settings)


def get_inference() -> InferenceService:
    return _inference_client()
