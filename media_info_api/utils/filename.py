import re
import secrets
import time
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

DEFAULT_EXTENSION = "tmp"
MAX_EXTENSION_LENGTH = 10


def extension_from_url(url: str, default: str = DEFAULT_EXTENSION) -> str:
    """Lower-cased extension of the URL path, or ``default``"""
    path = unquote(urlparse(url).path or "")
    suffix = PurePosixPath(path).suffix.lower().lstrip(".")
    suffix = re.sub(r'[^a-z0-9]', '', suffix)
    if not suffix or len(suffix) > MAX_EXTENSION_LENGTH:
        return default
    return suffix


def generate_filename_base(prefix: str = "file") -> str:
    """Unique filename base: <prefix>_<unix time>_<8 hex chars>"""
    safe_prefix = re.sub(r'[^a-zA-Z0-9_-]', '', prefix) or "file"
    return f"{safe_prefix}_{int(time.time())}_{secrets.token_hex(4)}"


def temp_filename_for_url(url: str, prefix: str = "media") -> str:
    return f"{generate_filename_base(prefix)}.{extension_from_url(url)}"
