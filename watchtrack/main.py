from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from watchtrack.routes import admin, tmdb, user, watchlist
from watchtrack.middleware.security import SecurityHeadersMiddleware
from watchtrack.utils import security as auth_security
import os
import logging

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown with the active configuration"""
    logger.info("=" * 60)
    logger.info("WatchTrack API Starting...")
    logger.info(f"   Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"   CORS Origins: {len(allowed_origins)} configured")
    logger.info(f"   TMDB key configured: {bool(os.getenv('TMDB_API_KEY'))}")
    if auth_security.uses_fallback_secret():
        logger.warning("   SUPABASE_JWT_SECRET not set, using the built-in default: tokens can be forged")
    logger.info("=" * 60)

    yield

    logger.info("=" * 60)
    logger.info("WatchTrack API Shutting Down...")
    logger.info("=" * 60)


# Interactive docs are not served in production
docs_enabled = os.getenv("ENVIRONMENT") != "production"

# Create FastAPI app with lifespan handler
app = FastAPI(
    title="WatchTrack API",
    description="Personal movie/TV watchlist with TMDB lookup",
    version="1.0.0",
    docs_url="/docs" if docs_enabled else None,
    redoc_url="/redoc" if docs_enabled else None,
    lifespan=lifespan
)

# ============================================
# Security Configuration
# ============================================

# CORS - Whitelist allowed origins
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
]
if production_url := os.getenv("FRONTEND_URL"):
    allowed_origins.append(production_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware, allow_docs_assets=docs_enabled)

# Trusted Hosts - Production only
if os.getenv("ENVIRONMENT") == "production":
    if trusted_hosts := [h for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


# ============================================
# Exception Handlers - {error, details?} body with CORS on every response
# ============================================

def error_response(request: Request, status_code: int, error: str, details=None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    response = JSONResponse(status_code=status_code, content=content)

    # Error responses skip the CORS middleware when raised deep in the stack
    origin = request.headers.get("origin")
    if origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        return error_response(request, exc.status_code, exc.detail.get("error", ""), exc.detail.get("details"))
    return error_response(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", "")
        }
        for err in errors
    ]
    if any(err.get("type") == "missing" for err in errors):
        return error_response(request, 400, "Missing required fields", details)
    return error_response(request, 400, "Invalid request", details)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return error_response(request, 500, "Internal server error")


# ============================================
# Routes
# ============================================

@app.get("/", tags=["Health"])
async def root():
    """Basic health check"""
    return {
        "message": "WatchTrack API",
        "version": "1.0.0",
        "status": "healthy",
        "docs": "/docs"
    }

@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check for monitoring"""
    return {
        "status": "healthy",
        "api_version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

app.include_router(watchlist.router)
app.include_router(tmdb.router)
app.include_router(user.router)
app.include_router(user.session_router)
app.include_router(admin.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
