import logging
import time
from typing import Any, Optional

import aiofiles
import aiofiles.os
from rich.logging import RichHandler

from media_info_api.config.settings import config
from media_info_api.core.context import RequestContext

logger = logging.getLogger("media_info_api")

CONTEXT_MAX_CHARS = 2048


def setup_logging() -> None:
    """Configure root logging from config (rich console by default)"""
    if config.logging.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
    else:
        handler = logging.StreamHandler()
    logging.basicConfig(
        level=config.logging.level,
        format=config.logging.format,
        datefmt="[%X]",
        handlers=[handler],
    )


def truncate_context(context: str, limit: int = CONTEXT_MAX_CHARS) -> str:
    if len(context) > limit:
        return context[:limit] + "... (truncated)"
    return context


async def write_request_log(ctx: RequestContext, message: str) -> None:
    """Append a timestamped line to the request's own log file"""
    if not ctx.log_path or not config.logging.request_log_files:
        return
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    try:
        await aiofiles.os.makedirs(ctx.log_path.parent, exist_ok=True)
        async with aiofiles.open(ctx.log_path, "a", encoding="utf-8") as f:
            await f.write(f"[{timestamp}] {message}\n")
    except OSError as e:
        logger.warning(f"Cannot write request log {ctx.log_path}: {e}")


async def log_with_context(
    ctx: RequestContext,
    level: int,
    message: str,
    context: Optional[str] = None,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Includes request_id for tracing and mirrors the line into the request log file.
    """
    extra = {
        "request_id": ctx.request_id,
        **kwargs
    }
    if context:
        message = f"{message}\nContext/Details:\n{truncate_context(context)}"
    logger.log(level, f"[{ctx.request_id}] {message}", extra=extra)
    await write_request_log(ctx, message)

async def log_info(ctx: RequestContext, message: str, **kwargs: Any) -> None:
    await log_with_context(ctx, logging.INFO, message, **kwargs)

async def log_error(ctx: RequestContext, message: str, **kwargs: Any) -> None:
    await log_with_context(ctx, logging.ERROR, message, **kwargs)

async def log_warning(ctx: RequestContext, message: str, **kwargs: Any) -> None:
    await log_with_context(ctx, logging.WARNING, message, **kwargs)

async def log_debug(ctx: RequestContext, message: str, **kwargs: Any) -> None:
    await log_with_context(ctx, logging.DEBUG, message, **kwargs)
