from typing import List, Optional
from urllib.parse import urlparse
from media_info_api.config.settings import config


def parse_accept_language(header: str) -> List[str]:
    """Primary language tags from an Accept-Language header, best quality first"""
    weighted = []
    for position, item in enumerate(header.split(",")):
        tag, _, params = item.strip().partition(";")
        tag = tag.strip().split("-")[0].lower()
        if not tag:
            continue
        quality = 1.0
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            weighted.append((-quality, position, tag))
    return [tag for _, _, tag in sorted(weighted)]


def get_locale(accept_language: Optional[str] = None) -> str:
    """Best supported locale for the request, else the configured default"""
    for tag in parse_accept_language(accept_language or ""):
        if tag in config.i18n.supported_locales:
            return tag
    return config.i18n.default_locale


def safe_url_for_log(url: str) -> str:
    """URL without query string or credentials, for logging"""
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
        if parsed.port:
            host = f"{host}:{parsed.port}"
        base_url = f"{parsed.scheme}://{host}{parsed.path}"

        if parsed.query:
            return f"{base_url}?..."

        return base_url
    except ValueError:
        return "invalid_url"
