"""
Tracking identifier generation.

Tracking IDs are the customer-facing parcel codes, e.g. SWD-20240131-7K2QX9PA.
They never look like the internal UUID primary key.
"""

import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from swiftdrop.app.core.config import settings

TRACKING_ALPHABET = string.ascii_uppercase + string.digits
TRACKING_SUFFIX_LENGTH = 8


def generate_tracking_id(prefix: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Return a new tracking identifier: PREFIX-YYYYMMDD-XXXXXXXX."""
    prefix = prefix or settings.tracking_id_prefix
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(TRACKING_SUFFIX_LENGTH))
    return f"{prefix}-{now:%Y%m%d}-{suffix}"
