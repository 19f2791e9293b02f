from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List

from fastapi import HTTPException, Request, status

from menu_admin.config import settings

# In-memory store: {client_key: [timestamps]}
_autofill_rate_limit_store: Dict[str, List[datetime]] = defaultdict(list)


async def check_image_autofill_rate_limit(request: Request) -> None:
    """
    Dependency limiting image auto-fill calls per client (IMAGE_AUTOFILL_RATE_LIMIT_PER_MINUTE).
    Raises 429 Too Many Requests if exceeded.

    NOTE: In-memory store; a multi-worker deployment needs shared storage (e.g. Redis).
    """
    client_key = request.client.host if request.client else "unknown"
    now = datetime.now(timezone.utc)
    cutoff = now - timedelta(minutes=1)

    # Drop entries older than the window
    _autofill_rate_limit_store[client_key] = [
        ts for ts in _autofill_rate_limit_store[client_key] if ts > cutoff
    ]

    if len(_autofill_rate_limit_store[client_key]) >= settings.IMAGE_AUTOFILL_RATE_LIMIT_PER_MINUTE:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {settings.IMAGE_AUTOFILL_RATE_LIMIT_PER_MINUTE} requests per minute."
        )

    _autofill_rate_limit_store[client_key].append(now)
