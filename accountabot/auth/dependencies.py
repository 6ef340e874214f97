"""FastAPI dependencies for authenticating the scheduler-triggered sweeps."""

import hmac
import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

load_dotenv()

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def verify_reminder_secret(credentials: HTTPAuthorizationCredentials = Depends(security)) -> None:
    """Require `Authorization: Bearer <REMINDER_API_KEY>` on sweep endpoints.

    When REMINDER_API_KEY is not configured the request is allowed through
    (development mode) and a warning is logged.

    Raises:
        HTTPException: 401 if the key is configured and the bearer does not match
    """
    expected = os.getenv("REMINDER_API_KEY")
    if not expected:
        logger.warning("REMINDER_API_KEY is not set; sweep endpoints are unauthenticated")
        return

    provided = credentials.credentials if credentials else ""
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
