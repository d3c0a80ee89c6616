from __future__ import annotations

import secrets
import string

_ALPHABET = string.ascii_uppercase + string.digits
REPORT_ID_LENGTH = 9


def new_report_id() -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(REPORT_ID_LENGTH))

