"""FastAPI application entry point."""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salesdesk.core.config import settings
from salesdesk.core.structured_logging import configure_logging
from salesdesk.services.backend_client import BackendClient
from salesdesk.services.snapshot_service import DashboardSnapshot

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[FastApiIntegration(transaction_style="endpoint")],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Chat transcripts and customer emails stay out of Sentry
    )
    logger.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from salesdesk.core.rate_limit import limiter


# ============================================================================
# Lifespan: one backend client and one snapshot per process
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    backend = BackendClient(settings.BACKEND_URL, settings.BACKEND_SERVICE_KEY)
    app.state.backend = backend
    app.state.snapshot = DashboardSnapshot(backend)
    logger.info(f"Sales dashboard API starting (env={settings.ENV}, auth={settings.AUTH_PROVIDER})")
    try:
        yield
    finally:
        await backend.aclose()


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Sales Dashboard API",
    description="Sales-support inbox, ticket status and contact directory",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Route gate runs inside CORS so preflight responses are never redirected
from salesdesk.core.auth_gate import auth_gate_middleware
app.middleware("http")(auth_gate_middleware)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

# ============================================================================
# Routers
# ============================================================================

from salesdesk.routers import auth, contacts, conversations, pages, team, tickets, webhooks

# Auth router (always mounted)
app.include_router(auth.router, prefix="/auth", tags=["auth"])

# Landing routes (dashboard, admin, login, unauthorized)
app.include_router(pages.router, tags=["pages"])

# Inbox and directory
app.include_router(conversations.router)
app.include_router(contacts.router)
app.include_router(tickets.router)

# Team management (admin only)
app.include_router(team.router)

# Backend change notifications
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])

# WebSocket for live dashboard updates
from salesdesk.routers import websocket as ws_router
app.include_router(ws_router.router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """Liveness probe; does not touch the backend."""
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}


def main() -> None:
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")
    uvicorn.run("salesdesk.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
