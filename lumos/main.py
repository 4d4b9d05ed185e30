import asyncio
import logging
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from supabase import Client

from lumos.config import settings
from lumos.core.rate_limit import limiter
from lumos.database.supabase_client import get_supabase, check_connection
from lumos.modules.auth import routes as auth_routes
from lumos.modules.profiles import routes as profiles_routes
from lumos.modules.preferences import routes as preferences_routes
from lumos.modules.conversations import routes as conversations_routes
from lumos.modules.llm import routes as llm_routes
from lumos.modules.academic import routes as academic_routes
from lumos.modules.voice import routes as voice_routes
from lumos.modules.videos import routes as videos_routes
from lumos.modules.resources import routes as resources_routes
from lumos.modules.credits import routes as credits_routes
from lumos.modules.timebank import routes as timebank_routes
from lumos.modules.webhooks import routes as webhooks_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


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
app.include_router(profiles_routes.router, prefix="/api")
app.include_router(preferences_routes.router, prefix="/api")
app.include_router(conversations_routes.router, prefix="/api")
app.include_router(llm_routes.router, prefix="/api")
app.include_router(academic_routes.router, prefix="/api")
app.include_router(voice_routes.router, prefix="/api")
app.include_router(videos_routes.router, prefix="/api")
app.include_router(resources_routes.router, prefix="/api")
app.include_router(credits_routes.router, prefix="/api")
app.include_router(timebank_routes.router, prefix="/api")
app.include_router(webhooks_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.llm_enabled:
        logger.warning("OPENROUTER_API_KEY not set, tutor replies will use fallback text")

    # Drop voice connections idle for longer than voice_session_idle_minutes
    from lumos.modules.voice.cleanup_scheduler import voice_cleanup_loop
    app.state.voice_cleanup_task = asyncio.create_task(voice_cleanup_loop())
    logger.info(f"Voice cleanup started - checking every {settings.voice_cleanup_interval_seconds}s")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "voice_cleanup_task", None)
    if task:
        task.cancel()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(supabase: Client = Depends(get_supabase)):
    """Readiness probe: Supabase must answer a trivial query."""
    if not check_connection(supabase):
        return JSONResponse(status_code=503, content={"status": "not ready", "database": "unreachable"})
    return {"status": "ready", "database": "ok"}
