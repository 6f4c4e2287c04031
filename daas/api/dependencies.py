from fastapi import Depends
from sqlalchemy.orm import Session

from daas.api.core.container import Container, get_container
from daas.db.connection import get_db
from daas.db.repository import SqlAlchemyEntityStore
from daas.domain.access import AccessRequestService


def get_entity_store(db: Session = Depends(get_db)) -> SqlAlchemyEntityStore:
    return SqlAlchemyEntityStore(db)


def get_access_service(
    store: SqlAlchemyEntityStore = Depends(get_entity_store),
    container: Container = Depends(get_container),
) -> AccessRequestService:
    return AccessRequestService(
        store=store,
        notifier=container.notifier,
        policy=container.policy,
        notification_timeout=container.settings.notification_timeout_seconds,
        notify_in_background=container.settings.notify_in_background,
    )
