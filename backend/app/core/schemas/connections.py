# app/core/schemas/connections.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class InvitationCreate(BaseModel):
    invite_type: str = Field("code", pattern="^(code|link|qr)$")
    expires_in_days: Optional[int] = Field(None, ge=1, le=365, description="None means the code never expires")

class InvitationResponse(BaseModel):
    id: int
    code: str
    type: str
    expires_at: Optional[datetime] = None
    max_uses: int
    current_uses: int
    invite_link: str

class ConnectRequest(BaseModel):
    invite_code: str = Field(..., min_length=1, max_length=32)

class DoctorInfo(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ConnectionResponse(BaseModel):
    connected: bool
    doctor: Optional[DoctorInfo] = None
