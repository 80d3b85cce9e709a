"""FastAPI entry point for the student risk analysis service."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from services.concurrency import ConcurrencyLimitMiddleware
from services.learning_client import get_learning_client
from services.middleware import RequestIdMiddleware
from services.risk_engine import RiskAnalysisEngine

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the learning-data pool and build the engine that owns the profile store."""
    client = get_learning_client()
    await client.start()
    app.state.risk_engine = RiskAnalysisEngine()
    logger.info(
        "Risk engine ready (mock data: %s, cohort concurrency: %d)",
        settings.debug and settings.use_mock_data, settings.cohort_max_concurrency,
    )

    yield

    await client.close()


app = FastAPI(
    title="Student Risk Analysis",
    description="Risk scoring, outcome projection and intervention planning from student activity metrics",
    version="0.1.0",
    lifespan=lifespan,
)

# Outermost first: CORS → RequestId → ConcurrencyLimit → routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(ConcurrencyLimitMiddleware, paths={"/api/risk/cohort"})

from api.health import router as health_router  # noqa: E402
from api.risk import router as risk_router  # noqa: E402

app.include_router(health_router)
app.include_router(risk_router)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.service_port,
        reload=settings.debug,
    )
