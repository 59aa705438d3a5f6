import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from media_info_api.config.settings import config

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"


class I18n:
    """Message catalogs keyed by locale code, one JSON file per locale"""

    def __init__(self, locales_dir: Path = LOCALES_DIR):
        self.locales_dir = locales_dir
        self.default_locale = config.i18n.default_locale
        self.catalogs: Dict[str, Dict[str, Any]] = {}
        self.load_catalogs()

    def load_catalogs(self) -> None:
        if not self.locales_dir.is_dir():
            logger.warning(f"No message catalogs at {self.locales_dir}")
            return

        for path in sorted(self.locales_dir.glob("*.json")):
            try:
                self.catalogs[path.stem] = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Skipping message catalog {path.name}: {e}")

    def lookup(self, key: str, locale: str) -> Optional[str]:
        """Template for a dotted key such as ``error.timeout``, or None"""
        node: Any = self.catalogs.get(locale)
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def get(self, key: str, locale: Optional[str] = None, **params: Any) -> str:
        """
        Message for ``key`` in ``locale``.
        Falls back to the default locale, then to the key itself.
        Templates whose placeholders are not all supplied come back unformatted.
        """
        candidates = [locale, self.default_locale, "en"]
        template = next(
            (t for t in (self.lookup(key, c) for c in candidates if c) if t is not None),
            None,
        )
        if template is None:
            return key

        try:
            return template.format(**params)
        except (KeyError, IndexError):
            return template


i18n = I18n()
