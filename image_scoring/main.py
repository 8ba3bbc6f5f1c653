from fastapi import Depends, FastAPI
from starlette.responses import JSONResponse

from image_scoring import evaluation, system
from image_scoring.__version__ import __version__
from image_scoring.config import settings
from image_scoring.constants import APP_NAME, APP_TITLE, PATH_PREFIX
from image_scoring.core.observability import PrometheusMiddleware, metrics_endpoint
from image_scoring.evaluation.handler import EvaluationHandler, get_handler
from image_scoring.log import get_logger, setup_logging

setup_logging(settings.log_level)
logger = get_logger(__name__)

app = FastAPI(
    title=APP_TITLE,
    version=__version__,
    debug=settings.debug,
    docs_url=f"{PATH_PREFIX}/docs",
    redoc_url=f"{PATH_PREFIX}/redoc",
    openapi_url=f"{PATH_PREFIX}/openapi.json",
    description="Image scoring through a Dify workflow",
)

# Add Prometheus middleware
app.add_middleware(PrometheusMiddleware, app_name=APP_NAME)

# Add metrics endpoint
app.add_route(f"{PATH_PREFIX}/metrics", metrics_endpoint)

app.include_router(evaluation.router, prefix=PATH_PREFIX)
app.include_router(system.router, prefix=PATH_PREFIX)

if not settings.dify.is_configured:
    logger.warning("DIFY_API_KEY is not set; evaluation requests will be rejected")


@app.get(f"{PATH_PREFIX}/health")
async def health(handler: EvaluationHandler = Depends(get_handler)):
    """Basic health check endpoint"""
    return JSONResponse(
        content={"status": "available", "service": APP_NAME, "dify_configured": handler.describe()["configured"]}
    )


@app.get("/")
async def root():
    """Root endpoint redirect"""
    return JSONResponse(
        content={"message": f"Welcome to {APP_TITLE}", "docs": f"{PATH_PREFIX}/docs", "health": f"{PATH_PREFIX}/health"}
    )
