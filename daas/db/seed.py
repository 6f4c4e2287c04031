"""Demo data for local runs: four users, four documents, two pending requests."""

from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from daas.db.models import AccessRequestRecord, DocumentRecord, UserRecord
from daas.domain.access.entities import AccessType, RequestStatus, UserRole, utcnow
from daas.observability.logging import get_logger

logger = get_logger(__name__)


def _is_empty(db: Session, model) -> bool:
    return db.scalar(select(func.count()).select_from(model)) == 0


def seed_database(db: Session) -> None:
    """Insert demo rows into each table that is still empty."""
    now = utcnow()

    if _is_empty(db, UserRecord):
        users = [
            UserRecord(name="John Doe", email="john.doe@company.com", role=UserRole.USER),
            UserRecord(name="Jane Smith", email="jane.smith@company.com", role=UserRole.USER),
            UserRecord(name="Bob Johnson", email="bob.johnson@company.com", role=UserRole.APPROVER),
            UserRecord(name="Alice Brown", email="alice.brown@company.com", role=UserRole.ADMIN),
        ]
        db.add_all(users)
        db.commit()
        logger.info("Seeded users", extra={"count": len(users)})

    if _is_empty(db, DocumentRecord):
        documents = [
            DocumentRecord(
                title="Company Financial Report 2024",
                description="Annual financial statements and performance metrics",
                created_at=now - timedelta(days=30),
            ),
            DocumentRecord(
                title="Employee Handbook",
                description="HR policies and procedures for all employees",
                created_at=now - timedelta(days=60),
            ),
            DocumentRecord(
                title="Product Roadmap 2025",
                description="Strategic product development plan for next year",
                created_at=now - timedelta(days=15),
            ),
            DocumentRecord(
                title="Security Compliance Guidelines",
                description="Information security policies and compliance requirements",
                created_at=now - timedelta(days=45),
            ),
        ]
        db.add_all(documents)
        db.commit()
        logger.info("Seeded documents", extra={"count": len(documents)})

    if _is_empty(db, AccessRequestRecord):
        users = db.scalars(select(UserRecord).order_by(UserRecord.id)).all()
        documents = db.scalars(select(DocumentRecord).order_by(DocumentRecord.id)).all()
        if len(users) < 2 or len(documents) < 2:
            return

        requests = [
            AccessRequestRecord(
                requester_id=users[0].id,
                document_id=documents[0].id,
                reason="Need to review financial data for quarterly presentation",
                access_type=AccessType.READ,
                status=RequestStatus.PENDING,
                requested_at=now - timedelta(hours=2),
                version=1,
            ),
            AccessRequestRecord(
                requester_id=users[1].id,
                document_id=documents[1].id,
                reason="Updating employee onboarding process",
                access_type=AccessType.EDIT,
                status=RequestStatus.PENDING,
                requested_at=now - timedelta(hours=1),
                version=1,
            ),
        ]
        db.add_all(requests)
        db.commit()
        logger.info("Seeded access requests", extra={"count": len(requests)})
