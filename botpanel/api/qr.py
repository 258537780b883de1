"""
QR assignment endpoint (read-only for tenants).
"""
import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from botpanel.db import schemas
from botpanel.db.database import get_db
from botpanel.db.repositories import qr as qr_repo
from botpanel.api.deps import get_current_user_id

router = APIRouter(prefix="/qr", tags=["qr"])


@router.get("/", response_model=schemas.AssignQR)
def get_qr_assignment_endpoint(
    db: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    assignment = qr_repo.get_assignment(db, user_id=user_id)
    if assignment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No QR assigned")
    return assignment
