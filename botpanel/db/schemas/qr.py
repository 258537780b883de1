import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class AssignQR(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    url_qr: str
    port: str
    is_assigned: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
