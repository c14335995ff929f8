"""Pydantic schemas for the activity log."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ActivityLogOut(BaseModel):
    log_id: int
    user_id: int
    action_type: str
    table_name: str
    record_id: int
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
