from sqlalchemy import (
    Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import declarative_base

from daas.domain.access.entities import AccessType, RequestStatus, UserRole, utcnow

Base = declarative_base()


class UserRecord(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)


class DocumentRecord(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AccessRequestRecord(Base):
    __tablename__ = "access_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="RESTRICT"), nullable=False)
    reason = Column(String(500), nullable=False)
    access_type = Column(Enum(AccessType), nullable=False)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING, index=True)
    requested_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    version = Column(Integer, nullable=False, default=1)  # optimistic concurrency token


class DecisionRecord(Base):
    __tablename__ = "decisions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # unique: one decision per access request
    access_request_id = Column(
        Integer, ForeignKey("access_requests.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    approver_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    approved = Column(Boolean, nullable=False)
    comment = Column(Text, nullable=False, default="")
    decided_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


users_table = UserRecord.__table__
documents_table = DocumentRecord.__table__
access_requests_table = AccessRequestRecord.__table__
decisions_table = DecisionRecord.__table__
