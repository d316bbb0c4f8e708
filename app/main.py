import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import MatchmakingError
from app.db.session import dispose_engine
from app.api.auth import router as auth_router
from app.api.creators import router as creators_router
from app.api.editors import router as editors_router
from app.api.matches import router as matches_router
from app.api.chat import router as chat_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up CreatorSync API...")
    yield
    logger.info("Shutting down CreatorSync API...")
    await dispose_engine()


app = FastAPI(
    title="CreatorSync API",
    docs_url="/docs" if not settings.APP_DOMAIN else None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(MatchmakingError)
async def matchmaking_error_handler(request: Request, exc: MatchmakingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    body = {"code": exc.code, "detail": exc.detail}
    current = getattr(exc, "current", None)
    if current is not None:
        body["current"] = current
    return JSONResponse(status_code=exc.status_code, content={"error": body})


# Include routers
app.include_router(auth_router)
app.include_router(creators_router)
app.include_router(editors_router)
app.include_router(matches_router)
app.include_router(chat_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"message": "CreatorSync API", "version": "1.0"}
