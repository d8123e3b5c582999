# app/core/schemas/tracking.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
import datetime as dt

# --- Время ношения ---

class WearTimeLogCreate(BaseModel):
    date: Optional[dt.date] = Field(None, description="Day of the log, today if omitted")
    hours_worn: float = Field(..., ge=0, le=24, description="Hours the aligners were worn")

class WearTimeLogResponse(BaseModel):
    id: int
    user_id: int
    date: dt.date
    hours_worn: float

    model_config = ConfigDict(from_attributes=True)

# --- Фото прогресса ---

class ProgressPhotoCreate(BaseModel):
    aligner_number: int = Field(..., ge=1)
    photo_type: str = Field(..., min_length=1, max_length=32)
    storage_path: str = Field(..., min_length=1, description="Object key of the already uploaded photo")

class ProgressPhotoResponse(BaseModel):
    id: int
    user_id: int
    aligner_number: int
    photo_type: str
    storage_path: str
    captured_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)

# --- Симптомы ---

class SymptomLogCreate(BaseModel):
    date: Optional[dt.date] = Field(None, description="Day of the symptom, today if omitted")
    symptom_type: str = Field(..., pattern="^(pain|discomfort|soreness|sensitivity|pressure|other)$")
    severity: str = Field(..., pattern="^(mild|moderate|severe)$")
    notes: Optional[str] = Field(None, max_length=1000)

class SymptomLogResponse(BaseModel):
    id: int
    user_id: int
    date: dt.date
    symptom_type: str
    severity: str
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)

# --- План лечения ---

class TreatmentPlanCreate(BaseModel):
    start_date: dt.date
    total_aligners: int = Field(..., ge=1)
    aligner_change_interval: int = Field(..., ge=1, description="Days between aligner changes")
    daily_wear_time_goal: Optional[float] = Field(None, gt=0, le=24)

class TreatmentPlanUpdate(BaseModel):
    total_aligners: Optional[int] = Field(None, ge=1)
    current_aligner: Optional[int] = Field(None, ge=1)
    aligner_change_interval: Optional[int] = Field(None, ge=1)
    daily_wear_time_goal: Optional[float] = Field(None, gt=0, le=24)

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self

class TreatmentPlanResponse(BaseModel):
    id: int
    user_id: int
    start_date: Optional[dt.date] = None
    total_aligners: int
    current_aligner: int
    aligner_change_interval: int
    daily_wear_time_goal: float
    last_aligner_change_date: Optional[dt.date] = None
    next_aligner_change_date: Optional[dt.date] = None

    model_config = ConfigDict(from_attributes=True)

# --- Устройства и уведомления ---

class FCMTokenRequest(BaseModel):
    token: str = Field(..., min_length=10)
    platform: str = Field("web", pattern="^(web|android|ios)$")

class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    body: str
    is_read: bool
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)
