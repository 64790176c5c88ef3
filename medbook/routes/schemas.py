from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator


class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class DoctorResponse(BaseModel):
    id: int
    user_id: int
    specialization: str
    hospital: str
    location: str
    fee: int
    experience: int
    about: str | None = None
    status: str
    user: UserSummary | None = None

    class Config:
        from_attributes = True


class DoctorSummary(BaseModel):
    id: int
    specialization: str
    hospital: str
    user: UserSummary | None = None

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    id: int
    doctor_id: int
    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    is_booked: bool

    class Config:
        from_attributes = True


class CreateSlotRequest(BaseModel):
    date: str
    start_time: str = Field(validation_alias=AliasChoices('start_time', 'startTime'))
    end_time: str = Field(validation_alias=AliasChoices('end_time', 'endTime'))
    duration: int
    doctor_id: int | None = Field(default=None, validation_alias=AliasChoices('doctor_id', 'doctorId'))

    @field_validator('date', 'start_time', 'end_time')
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    slot_id: int
    date: str
    start_time: str
    end_time: str
    status: str
    reason: str | None = None
    created_at: datetime
    patient: UserSummary | None = None
    doctor: DoctorSummary | None = None

    class Config:
        from_attributes = True


class CreateAppointmentRequest(BaseModel):
    doctor_id: int = Field(validation_alias=AliasChoices('doctor_id', 'doctorId'))
    slot_id: int = Field(validation_alias=AliasChoices('slot_id', 'slotId'))
    patient_id: int | None = Field(default=None, validation_alias=AliasChoices('patient_id', 'patientId'))
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class UpdateStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def normalize_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Status is required.')
        return normalized


class SlotAuditResponse(BaseModel):
    consistent: bool
    inconsistent_slot_ids: list[int]
