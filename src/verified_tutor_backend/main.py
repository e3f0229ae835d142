'''

'''
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from .database.engine import create_db_engine_and_session_factory, create_all_tables, dispose_db_engine
from .common.exceptions import LessonVerificationError, NotFound
from .common.logger import log
from .common.config import settings
from .api import lessons, tutors, availability

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup and shutdown events.
    """
    # --- On App Startup ---
    log.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    create_db_engine_and_session_factory()
    if settings.database_url.startswith("sqlite"):
        await create_all_tables()

    yield # --- Application is now running ---

    # --- On App Shutdown ---
    log.info("Application lifespan shutdown...")
    await dispose_db_engine()


# ---- CREATING THE APP ----
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# --- Add CORS Middleware ---
origins = [
    "http://localhost",
    "http://localhost:3000",
]
origins.extend(settings.BACKEND_CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],)
# --- End of CORS Middleware ---

@app.exception_handler(LessonVerificationError)
async def lesson_verification_error_handler(request: Request, exc: LessonVerificationError):
    """Maps typed domain errors to HTTP responses (404 vs 409 vs 422 ...)."""
    if isinstance(exc, NotFound):
        log.warning(f"{request.method} {request.url.path} -> {type(exc).__name__}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )

@app.get("/")
async def health_check():
    return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

app.include_router(lessons.router)
app.include_router(tutors.router)
app.include_router(availability.router)
