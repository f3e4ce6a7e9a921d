from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable

from locator_devkit.db import AsyncDatabaseManager, Base, create_all_tables
from sqlalchemy import Boolean, String, Uuid, select
from sqlalchemy.orm import Mapped, mapped_column

from route_api.errors import ConfigurationError, TenantNotAuthorized, UpstreamHardFailure

logger = logging.getLogger(__name__)


class TenantORM(Base):
    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TenantStore(ABC):
    @abstractmethod
    async def is_active(self, tenant_id: str) -> bool:
        raise NotImplementedError


class InMemoryTenantStore(TenantStore):
    def __init__(self, active_tenant_ids: Iterable[str] = ()) -> None:
        self._active = {tenant_id.lower() for tenant_id in active_tenant_ids}

    async def is_active(self, tenant_id: str) -> bool:
        return tenant_id.lower() in self._active


class SqlTenantStore(TenantStore):
    def __init__(self, db: AsyncDatabaseManager, create_tables: bool = False) -> None:
        self._db = db
        self._create_tables = create_tables
        self._ready = False

    async def is_active(self, tenant_id: str) -> bool:
        await self._ensure_ready()
        key = uuid.UUID(tenant_id)

        async def _run(session) -> bool:
            stmt = select(TenantORM.is_active).where(TenantORM.id == key)
            active = await session.scalar(stmt)
            return bool(active)

        return await self._db.run_with_session(_run)

    async def _ensure_ready(self) -> None:
        if self._ready:
            return
        await self._db.connect()
        if self._create_tables:
            await create_all_tables(self._db.engine, Base.metadata)
        self._ready = True


class TenantAuthorizer:
    """Confirms the caller's tenant exists and is active.

    Unknown and inactive tenants produce the same error so tenant ids cannot
    be enumerated.
    """

    def __init__(self, store: TenantStore | None) -> None:
        self._store = store

    async def authorize(self, tenant_id: str) -> None:
        if self._store is None:
            logger.error("tenant_store_not_configured", extra={"component": "route_api"})
            raise ConfigurationError()
        try:
            active = await self._store.is_active(tenant_id)
        except Exception as exc:
            logger.exception("tenant_store_failed", extra={"component": "route_api"})
            raise UpstreamHardFailure("Tenant store unavailable") from exc
        if not active:
            logger.info("tenant_rejected", extra={"component": "route_api", "tenant_id": tenant_id})
            raise TenantNotAuthorized()
