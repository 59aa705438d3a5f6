from .filename import extension_from_url, generate_filename_base, temp_filename_for_url
from .locale import get_locale, parse_accept_language, safe_url_for_log

__all__ = [
    "extension_from_url",
    "generate_filename_base",
    "get_locale",
    "parse_accept_language",
    "safe_url_for_log",
    "temp_filename_for_url",
]
