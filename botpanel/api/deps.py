"""
API dependency helpers.

Resolves the calling tenant from proxy headers (or DEV_MODE) and binds the
tenant id to the request session for row-level security.
"""
import logging
from typing import Optional, Tuple, Dict, Any

from fastapi import Header, HTTPException, status, Depends
from sqlalchemy.orm import Session

from botpanel.db import models
from botpanel.db.database import get_db, bind_tenant
from botpanel.api.auth import (
    DEV_USER_EMAIL,
    DEV_USER_NAME,
    resolve_identity_from_headers,
    get_or_create_user,
)
from botpanel.utils.runtime import dev_mode_active

logger = logging.getLogger(__name__)

# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 if identity cannot be resolved.

def get_current_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    try:
        is_dev_mode = dev_mode_active()
    except RuntimeError as exc:
        logger.error("DEV_MODE misconfiguration detected: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="DEV_MODE misconfigured")

    if is_dev_mode:
        email = DEV_USER_EMAIL
        name = DEV_USER_NAME
    else:
        name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    user = get_or_create_user(db, email=email, display_name=name)
    bind_tenant(db, user.id)

    current_user = {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "is_superadmin": bool(user.is_superadmin),
    }
    return user, current_user


def get_current_user_id(user_context=Depends(get_current_user_context)):
    """Shortcut dependency for routes that only need the tenant id."""
    user, _ = user_context
    return user.id
