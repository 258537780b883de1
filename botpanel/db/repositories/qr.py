"""
QR assignment repository functions.

Assignments are provisioned by operators; tenants only read their own.
"""
from __future__ import annotations

import uuid
from typing import Optional
from sqlalchemy.orm import Session

from botpanel.db import models
from botpanel.db.repositories import owned


def get_assignment(db: Session, *, user_id: uuid.UUID):
    return owned.scoped_query(db, models.AssignQR, user_id).first()


def assign_qr(db: Session, *, user_id: uuid.UUID, url_qr: str, port: str, is_assigned: bool = True):
    """Create or replace the tenant's QR assignment (operator tooling)."""
    row: Optional[models.AssignQR] = get_assignment(db, user_id=user_id)
    if row is None:
        row = models.AssignQR(user_id=user_id, url_qr=url_qr, port=port, is_assigned=is_assigned)
        db.add(row)
    else:
        row.url_qr = url_qr
        row.port = port
        row.is_assigned = is_assigned
    owned.commit_or_rollback(db)
    db.refresh(row)
    return row
