import asyncio
import ipaddress
import socket
from enum import Enum, auto
from urllib.parse import urlparse

from media_info_api.config.settings import config


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    BLOCKED = auto()
    INVALID = auto()


def is_absolute_url(url: str) -> bool:
    """Scheme and host present, nothing else assumed"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc and parsed.hostname)


class SecurityValidator:
    """
    Validate download targets without throwing exceptions.
    Returns result enum for separation of concerns.
    """

    @staticmethod
    async def validate_url(url: str) -> UrlValidationResult:
        """
        Validate URL against SSRF attacks when protection is enabled.
        Resolves the host off the event loop.
        """
        if not is_absolute_url(url):
            return UrlValidationResult.INVALID

        if not config.security.enable_ssrf_protection:
            return UrlValidationResult.OK

        hostname = urlparse(url).hostname

        try:
            addr_info = await asyncio.to_thread(socket.getaddrinfo, hostname, None)
            ips = [info[4][0] for info in addr_info]
        except socket.gaierror:
            # Unresolvable hosts fail later in the downloader with a transport error
            return UrlValidationResult.OK

        for ip_str in ips:
            try:
                ip = ipaddress.ip_address(ip_str)
            except ValueError:
                return UrlValidationResult.INVALID

            if not config.security.allow_localhost and ip.is_loopback:
                return UrlValidationResult.BLOCKED

            if not config.security.allow_private_ips and ip.is_private and not ip.is_loopback:
                return UrlValidationResult.BLOCKED

            if ip.is_link_local or ip.is_multicast:
                return UrlValidationResult.BLOCKED

        return UrlValidationResult.OK
