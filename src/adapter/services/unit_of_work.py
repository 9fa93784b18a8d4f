from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.event_record_repository import EventRecordRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.event_records = EventRecordRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Uncommitted work (including a failed bulk delete) is discarded as a unit
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
