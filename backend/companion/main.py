"""Main FastAPI application for the Virtual Self companion backend."""
from fastapi import FastAPI, Request

from companion.api.errors import register_exception_handlers
from companion.api.routes.experiences import router as experiences_router
from companion.api.routes.onboarding import router as onboarding_router
from companion.api.routes.plan import router as plan_router
from companion.api.routes.profile import router as profile_router
from companion.api.routes.state import router as state_router
from companion.core.config import settings
from companion.core.logging import configure_logging
from companion.core.middleware import RequestContextMiddleware
from companion.observability.client import init_opik
from companion.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)
app.add_middleware(RequestContextMiddleware)
register_exception_handlers(app)
app.include_router(onboarding_router)
app.include_router(experiences_router)
app.include_router(profile_router)
app.include_router(plan_router)
app.include_router(state_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
