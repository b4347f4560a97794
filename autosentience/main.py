"""FastAPI application for the AutoSentience predictive-maintenance backend."""

from datetime import datetime, timezone
from typing import Dict

import structlog
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware

from autosentience import models_db  # noqa: F401  (registers tables)
from autosentience.api.v1.endpoints import agent, agent_logs, alerts, bookings, ingest, predict, rca
from autosentience.config import settings
from autosentience.db.base import Base
from autosentience.db.session import engine
from autosentience.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AutoSentience - vehicle predictive maintenance API",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://127.0.0.1:3000", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event() -> None:
    """Create missing tables and log the effective configuration."""
    Base.metadata.create_all(bind=engine)
    logger.info(
        "api_startup",
        app=settings.app_name,
        version=settings.app_version,
        llm_base_url=settings.llm_base_url,
        llm_model=settings.llm_model,
        dedupe_open_alerts=settings.dedupe_open_alerts,
    )


@app.on_event("shutdown")
async def shutdown_event() -> None:
    logger.info("api_shutdown", app=settings.app_name)


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    return {
        "message": "AutoSentience - Predictive Maintenance API",
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


app.include_router(ingest.router, prefix="/v1/ingest", tags=["Ingest"])
app.include_router(predict.router, prefix="/v1/predict", tags=["Prediction"])
app.include_router(agent.router, prefix="/v1/agent", tags=["Agent"])
app.include_router(alerts.router, prefix="/v1/alerts", tags=["Alerts"])
app.include_router(rca.router, prefix="/v1/rca", tags=["RCA"])
app.include_router(agent_logs.router, prefix="/v1/agent-logs", tags=["Agent Logs"])
app.include_router(bookings.router, prefix="/v1/bookings", tags=["Bookings"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("autosentience.main:app", host="0.0.0.0", port=8000)
