from collections.abc import Callable
import time
from typing import Any

from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

from image_scoring.constants import APP_NAME

# Registered once per process; the default registry rejects duplicate names
REQUEST_COUNT = Counter(
    "image_scoring_requests_total",
    "Total requests processed",
    ["method", "path", "app_name"],
)

RESPONSE_COUNT = Counter(
    "image_scoring_responses_total",
    "Total responses sent",
    ["method", "path", "status_code", "app_name"],
)

REQUEST_DURATION = Histogram(
    "image_scoring_requests_duration_seconds",
    "Request processing time",
    ["method", "path", "app_name"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
)

REQUESTS_IN_PROGRESS = Gauge(
    "image_scoring_requests_in_progress",
    "Active requests being processed",
    ["method", "path", "app_name"],
)

EXCEPTION_COUNT = Counter(
    "image_scoring_exceptions_total",
    "Total exceptions raised during request processing",
    ["exception_type", "method", "path", "app_name"],
)

DIFY_UPLOADS = Counter(
    "image_scoring_dify_uploads_total",
    "Dify file uploads by outcome",
    ["outcome", "app_name"],
)

DIFY_WORKFLOW_RUNS = Counter(
    "image_scoring_dify_workflow_runs_total",
    "Dify workflow runs by request type and outcome",
    ["request_type", "outcome", "app_name"],
)

DIFY_WORKFLOW_DURATION = Histogram(
    "image_scoring_dify_workflow_seconds",
    "End-to-end workflow run time, uploads included",
    ["request_type", "app_name"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)


def record_upload(outcome: str) -> None:
    """Count one upload attempt; ``outcome`` is ``success``, ``http_error`` or ``invalid_body``"""
    DIFY_UPLOADS.labels(outcome=outcome, app_name=APP_NAME).inc()


def record_workflow_run(request_type: str, outcome: str, duration: float) -> None:
    """Count one workflow run and observe its duration in seconds"""
    DIFY_WORKFLOW_RUNS.labels(request_type=request_type, outcome=outcome, app_name=APP_NAME).inc()
    DIFY_WORKFLOW_DURATION.labels(request_type=request_type, app_name=APP_NAME).observe(duration)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Prometheus middleware for FastAPI request metrics
    """

    def __init__(self, app: Any, app_name: str = APP_NAME) -> None:
        super().__init__(app)
        self.app_name = app_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process HTTP request with metrics collection"""
        method = request.method
        path = self._resolve_path(request)

        start_time = time.time()
        REQUEST_COUNT.labels(method=method, path=path, app_name=self.app_name).inc()
        REQUESTS_IN_PROGRESS.labels(method=method, path=path, app_name=self.app_name).inc()

        response = None
        try:
            response = await call_next(request)

        except Exception as e:
            EXCEPTION_COUNT.labels(
                exception_type=type(e).__name__,
                method=method,
                path=path,
                app_name=self.app_name,
            ).inc()
            raise

        finally:
            REQUESTS_IN_PROGRESS.labels(method=method, path=path, app_name=self.app_name).dec()

            if response is not None:
                duration = time.time() - start_time
                REQUEST_DURATION.labels(method=method, path=path, app_name=self.app_name).observe(duration)
                RESPONSE_COUNT.labels(
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    app_name=self.app_name,
                ).inc()

        return response

    def _resolve_path(self, request: Request) -> str:
        """Resolve FastAPI route path, handling path parameters"""
        route = request.scope.get("route")
        if route is not None and hasattr(route, "path"):
            return route.path

        # Fallback to raw path
        return request.url.path


def metrics_endpoint(request: Request) -> StarletteResponse:
    """Prometheus metrics endpoint"""
    return StarletteResponse(generate_latest(), media_type="text/plain")
