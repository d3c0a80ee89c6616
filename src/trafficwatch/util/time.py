from __future__ import annotations

from datetime import datetime


def now_local_iso() -> str:
    """Local wall-clock time in the same shape as normalized EXIF dates."""
    return datetime.now().replace(microsecond=0).isoformat()
