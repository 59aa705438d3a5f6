import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from media_info_api.api import health, probe
from media_info_api.config.settings import config
from media_info_api.core.context import RequestContext
from media_info_api.core.logging import log_warning, setup_logging
from media_info_api.i18n import i18n
from media_info_api.utils.locale import get_locale

logger = logging.getLogger(__name__)

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(probe.router, tags=["Media Info"])
app.include_router(health.router, tags=["Health"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every HTTP error leaves as {"error": "..."}"""
    locale = get_locale(request.headers.get("accept-language"))
    detail = exc.detail
    if exc.status_code == 405:
        detail = i18n.get("error.method_not_allowed", locale=locale)
    elif exc.status_code == 404 and detail == "Not Found":
        detail = i18n.get("error.not_found", locale=locale)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed body or bad media_url -> 400"""
    locale = get_locale(request.headers.get("accept-language"))
    errors = exc.errors()

    json_error = next((err for err in errors if err.get("type") == "json_invalid"), None)
    if json_error is not None:
        reason = (json_error.get("ctx") or {}).get("error", json_error.get("msg", ""))
        message = i18n.get("error.invalid_json", locale=locale, reason=reason)
    else:
        message = i18n.get("error.media_url_required", locale=locale)

    ctx = RequestContext.create(config.storage.log_dir)
    await log_warning(ctx, f"Error (HTTP 400): {message}", context=repr(errors))

    return JSONResponse(status_code=400, content={"error": message})


@app.on_event("startup")
async def startup_event():
    setup_logging()
    for directory in (config.storage.temp_dir, config.storage.log_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create {directory}: {e}")
    logger.info(f"Temp directory: {config.storage.temp_dir}, ffprobe: {config.probe.ffprobe_path}")


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run("media_info_api.main:app", host="0.0.0.0", port=8000)
