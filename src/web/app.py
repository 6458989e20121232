"""FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from checks.orchestrator import CheckOrchestrator
from web.deps import get_config
from web.routes import checks, review, targets

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    orchestrator = CheckOrchestrator.from_config(config)
    app.state.store = orchestrator.store
    app.state.orchestrator = orchestrator
    logger.info("web.startup", db=str(config.paths.db))
    yield
    await orchestrator.aclose()
    logger.info("web.shutdown")


app = FastAPI(
    title="versionwatch",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(checks.router)
app.include_router(review.router)
app.include_router(targets.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
