import secrets
import time
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class RequestContext:
    """Per-request state passed explicitly through the pipeline"""
    request_id: str
    log_path: Optional[Path] = None
    temp_files: List[Path] = field(default_factory=list)

    @classmethod
    def create(cls, log_dir: Optional[Path] = None) -> "RequestContext":
        request_id = f"{int(time.time())}_{secrets.token_hex(4)}"
        log_path = log_dir / f"media_info_{request_id}.log" if log_dir else None
        return cls(request_id=request_id, log_path=log_path)

    def register_temp_file(self, path: Path) -> None:
        if path not in self.temp_files:
            self.temp_files.append(path)

    def cleanup(self) -> List[Path]:
        """Remove registered temp files. Safe to call more than once."""
        removed = []
        for path in self.temp_files:
            with suppress(FileNotFoundError):
                path.unlink()
                removed.append(path)
        self.temp_files.clear()
        return removed
