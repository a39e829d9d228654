from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProjectOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: str
    current_phase: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
