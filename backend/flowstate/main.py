"""Main FastAPI application for the FlowState backend."""
from fastapi import FastAPI, Request

from flowstate.api.routes.documents import router as documents_router
from flowstate.api.routes.plans import router as plans_router
from flowstate.api.routes.profile import router as profile_router
from flowstate.api.routes.prompts import router as prompts_router
from flowstate.core.config import settings
from flowstate.core.logging import configure_logging
from flowstate.core.middleware import RequestIDMiddleware
from flowstate.observability.client import flush_opik, init_opik
from flowstate.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)
app.add_middleware(RequestIDMiddleware)
app.include_router(profile_router)
app.include_router(plans_router)
app.include_router(documents_router)
app.include_router(prompts_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.on_event("shutdown")
async def shutdown_observability() -> None:
    flush_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
