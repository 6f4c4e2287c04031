from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from daas.domain.access.entities import AccessType, RequestStatus, UserRole


class CreateAccessRequestIn(BaseModel):
    document_id: int = Field(ge=1, description="Document the caller wants access to")
    reason: str = Field(min_length=1, max_length=500, description="Why access is needed")
    access_type: AccessType = Field(default=AccessType.READ, description="READ or EDIT")


class DecisionIn(BaseModel):
    approved: bool
    comment: str = Field(default="", max_length=500)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: UserRole


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    created_at: datetime


class DecisionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    approver_id: int
    approver_name: str
    approved: bool
    comment: str
    decided_at: datetime


class AccessRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_id: int
    requester_name: str
    document_id: int
    document_title: str
    reason: str
    access_type: AccessType
    status: RequestStatus
    requested_at: datetime
    decision: Optional[DecisionOut] = None


class ErrorOut(BaseModel):
    message: str
