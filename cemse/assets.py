"""
Certificate logo assets, loaded once per process.

Logos are read from CERTIFICATE_LOGO_DIR on first use, encoded as base64
data URIs and kept in a read-only mapping keyed by file stem
(``cemse.png`` -> ``"cemse"``).
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from threading import Lock
from types import MappingProxyType
from typing import Mapping, Optional

from cemse import config

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def load_logos(directory: Path | str) -> Mapping[str, str]:
    """Read every supported image in ``directory`` into a data-URI mapping."""
    directory = Path(directory)
    logos = {}
    if not directory.is_dir():
        logger.warning("Certificate logo directory not found: %s", directory)
        return MappingProxyType(logos)

    for path in sorted(directory.iterdir()):
        mime = MIME_TYPES.get(path.suffix.lower())
        if mime is None or not path.is_file():
            continue
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        logos[path.stem] = f"data:{mime};base64,{encoded}"

    logger.info("Loaded %s certificate logos from %s", len(logos), directory)
    return MappingProxyType(logos)


_logos: Optional[Mapping[str, str]] = None
_logos_lock = Lock()


def get_certificate_logos() -> Mapping[str, str]:
    """Get or load the process-wide logo mapping."""
    global _logos
    if _logos is not None:
        return _logos
    with _logos_lock:
        if _logos is not None:
            return _logos
        _logos = load_logos(config.CERTIFICATE_LOGO_DIR)
        return _logos


def reset_certificate_logos() -> None:
    """Forget the loaded logos (tests)."""
    global _logos
    with _logos_lock:
        _logos = None
