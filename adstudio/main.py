import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from adstudio.config import settings
from adstudio.core.exceptions import ExternalServiceError
from adstudio.core.responses import failure
from adstudio.modules.auth import routes as auth_routes
from adstudio.modules.templates import routes as templates_routes
from adstudio.modules.cloudinary import routes as cloudinary_routes
from adstudio.modules.assets import routes as assets_routes
from adstudio.modules.generation import routes as generation_routes
from adstudio.modules.settings import routes as settings_routes
from adstudio.modules.admin import routes as admin_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        error = f"Route {request.url.path} not found"
    else:
        error = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=failure(error), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=failure("Validation error", details=jsonable_encoder(exc.errors())),
    )


@app.exception_handler(ExternalServiceError)
async def external_service_exception_handler(request: Request, exc: ExternalServiceError):
    logger.error(f"{exc.service} error on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=failure(exc.message, service=exc.service))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content=failure("Internal server error"))
    return JSONResponse(status_code=500, content=failure(str(exc)))


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api")
app.include_router(templates_routes.router, prefix="/api")
app.include_router(cloudinary_routes.router, prefix="/api")
app.include_router(assets_routes.router, prefix="/api")
app.include_router(generation_routes.router, prefix="/api")
app.include_router(settings_routes.router, prefix="/api")
app.include_router(admin_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.heygen_api_key:
        logger.warning("HEYGEN_API_KEY not set; template details will come from the database and built-in fallbacks")
    if not settings.cloudinary_configured:
        logger.warning("Cloudinary not configured; /api/cloudinary endpoints will return 501")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy", "environment": settings.environment}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check; lists which vendor integrations are configured."""
    return {
        "status": "ready" if settings.supabase_url and settings.supabase_key else "degraded",
        "integrations": {
            "supabase": bool(settings.supabase_url and settings.supabase_key),
            "heygen": bool(settings.heygen_api_key),
            "openai": bool(settings.openai_api_key),
            "runwayml": bool(settings.runwayml_api_key),
            "cloudinary": settings.cloudinary_configured,
        },
    }
