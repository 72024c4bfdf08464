import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatrelay.core import database
from chatrelay.core.config import settings
from chatrelay.core.errors import ChatRelayError, InferenceError, InternalError
from chatrelay.api import chat, conversations, models
from chatrelay.services.auth import get_auth_verifier
from chatrelay.services.context import ContextAssembler
from chatrelay.services.llm import get_llm_provider
from chatrelay.services.store import ConversationStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure logging based on debug setting
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    database.init_db()

    # Collaborators are built once and shared by every request
    app.state.assembler = ContextAssembler(
        store=ConversationStore(database.engine),
        llm=get_llm_provider(),
    )
    app.state.auth_verifier = get_auth_verifier()

    logger.info(f"{settings.app_name} {settings.version} ready")
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


# Must be registered before CORSMiddleware so CORS wraps these 500s too
@app.middleware("http")
async def unhandled_error_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return await chatrelay_error_handler(request, InternalError(str(exc)))


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(conversations.router, prefix="/api/conversations", tags=["conversations"])
app.include_router(models.router, prefix="/api/models", tags=["models"])


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "message": f"{settings.app_name} API is running",
        "version": settings.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _error_body(error: str, details: str | None = None) -> dict:
    body = {"error": error}
    if details is not None and settings.expose_error_details:
        body["details"] = details
    return body


@app.exception_handler(ChatRelayError)
async def chatrelay_error_handler(request: Request, exc: ChatRelayError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")

    error = exc.error
    if isinstance(exc, InferenceError) and exc.is_credential_error:
        error = "Invalid or missing Gemini API key. Please check your configuration."

    details = exc.details if exc.include_details else None
    return JSONResponse(status_code=exc.status_code, content=_error_body(error, details))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=_error_body("Invalid request body", str(exc.errors())))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods both look like a missing endpoint
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

