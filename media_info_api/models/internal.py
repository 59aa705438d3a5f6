from pathlib import Path

from pydantic import BaseModel

class DownloadedAsset(BaseModel):
    """Local copy of a remote media file, owned by a single request"""
    local_path: Path
    originating_url: str
    size_bytes: int
