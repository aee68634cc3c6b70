from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class LoginRequest(BaseModel):
    email: str
    password: str


class LogoutRequest(BaseModel):
    clear_local: bool = False


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None


class SessionRead(BaseModel):
    state: str
    authenticated: bool
    user: Optional[SessionUser] = None
    expires_at: Optional[float] = None
    storage_mode: str


class RecordListResponse(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    storage_mode: str


class StartCallRequest(BaseModel):
    agent_id: str
    phone_number: str
    # Local agent record the call belongs to, when there is one
    agent_record_id: Optional[str] = None


class DeployAgentRequest(BaseModel):
    name: str
    voice: str
    greeting: Optional[str] = None
    description: Optional[str] = None
    temperature: Optional[float] = None
    interruption_sensitivity: Optional[float] = None


class TTSRequest(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    voice_id: str = "serena"


class VideoRequest(BaseModel):
    replica_id: str
    script: Optional[str] = None
    title: Optional[str] = None
    # Used to build a doctor's note script when no script is given
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    appointment_summary: Optional[str] = None


class TranslateRequest(BaseModel):
    text: str = Field(min_length=1)
    target_language: str
    source_language: Optional[str] = None


class CardRequest(BaseModel):
    name: str
    title: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None


class AuditRequest(BaseModel):
    type: str
    action: str
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = Field(default_factory=dict)


class DetectRequest(BaseModel):
    text: str = Field(min_length=1)


class RelayStartRequest(BaseModel):
    call_id: str = Field(min_length=1)
    target_language: Optional[str] = None


class RelayMessageRequest(BaseModel):
    message: str = Field(min_length=1, max_length=5000)
    target_language: Optional[str] = None


class DataExportRequest(BaseModel):
    export_type: str


class AnalyticsQuestion(BaseModel):
    question: str = Field(min_length=1)
    speak: bool = False
    voice_id: str = "serena"
