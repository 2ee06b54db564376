from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import PlainTextResponse
from app.config import settings
from app.web.auth_routes import router as auth_router
from app.web.operator_routes import router as operator_router
from app.web.report_routes import router as report_router
from app.web.coordinator_routes import router as coordinator_router
from app.services.api_client import UnauthenticatedError, create_api_client
from app.services.auth_service import verify_session_token
from app.services.csrf_service import CSRFMiddleware
from app.services.session_service import session_store
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.utils.response_utils import clear_session_cookie, redirect
from contextlib import asynccontextmanager
from pathlib import Path

import logging

_log_dir = Path(settings.LOG_DIR)
_log_dir.mkdir(parents=True, exist_ok=True)

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.FileHandler(_log_dir / "app.log"), logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown events"""
    logger.info("[>>] Starting %s portal...", settings.APP_NAME)
    app.state.api_client = create_api_client()
    logger.info("[OK] API client ready for %s", settings.API_BASE_URL)
    if settings.SECRET_KEY == "change-me":
        logger.warning("[WARN] SECRET_KEY is the default value; set it in production")
    yield
    logger.info("[<<] Shutting down %s portal...", settings.APP_NAME)
    session_store.clear()
    await app.state.api_client.aclose()
    logger.info("[OK] Sessions closed and API client released")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Portal web de reportes diarios de empadronamiento",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(UnauthenticatedError)
async def unauthenticated_handler(request: Request, exc: UnauthenticatedError):
    """La API rechazó los tokens de la sesión: se cierra y se vuelve al login."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    session_id = verify_session_token(token) if token else None
    session_store.destroy(session_id)
    logger.info("Session ended after API auth failure on %s", request.url.path)
    return clear_session_cookie(redirect("/login", status_code=302))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Registra todas las excepciones no tratadas"""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=True,
    )
    return PlainTextResponse(
        "Error interno del servidor. Si el problema persiste, contacte a soporte.",
        status_code=500,
    )


# Security Headers Middleware (also generates the per-request CSP nonce)
app.add_middleware(SecurityHeadersMiddleware)

# CSRF Middleware (must be added before CORS)
app.add_middleware(CSRFMiddleware)

# Restrictive CORS for same-origin deployment
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=[
        "Content-Type",
        "X-CSRF-Token",
        "HX-Request",
        "HX-Current-URL",
        "HX-Trigger",
        "HX-Target",
    ],
)


# Health check endpoint (API only)
@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


APP_DIR = Path(__file__).parent

# Mount static files
static_dir = APP_DIR / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")


# Include web routes (HTML pages)
app.include_router(auth_router)
app.include_router(operator_router)
app.include_router(report_router)
app.include_router(coordinator_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
