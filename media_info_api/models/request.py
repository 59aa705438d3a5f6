from pydantic import AnyHttpUrl, BaseModel, Field, field_validator
from urllib.parse import urlparse

class ProbeRequest(BaseModel):
    # http/https only, no length cap
    media_url: AnyHttpUrl = Field(..., description="URL of the audio or video file")

    @field_validator('media_url')
    @classmethod
    def validate_url_syntax(cls, v):
        """Absolute URL with a host (SSRF check done per request hop)"""
        parsed = urlparse(str(v))
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("Invalid URL format")
        return v
