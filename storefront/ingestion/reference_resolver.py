"""
Reference Resolver

Maps display names of lookup entities (brands, producers) to stable row ids.

Resolution is one atomic statement per name:

    INSERT INTO brands (name) VALUES (:name)
    ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
    RETURNING id

so two importers resolving the same new name at the same time both get the
single row's id instead of one of them hitting the unique constraint.
"""

from typing import Dict, Optional, Tuple, Type

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.connection import dialect_insert
from storefront.database.models import Base

logger = structlog.get_logger(__name__)


class ReferenceResolver:
    """
    Idempotent name -> id resolver for tables with a unique ``name`` column.

    Results are memoised per resolver instance; create one resolver per
    import run (or per transaction) so ids never outlive a rolled back run.

    Example:
        resolver = ReferenceResolver()
        brand_id = await resolver.resolve(session, Brand, "Lego")
    """

    def __init__(self):
        self._cache: Dict[Tuple[str, str], int] = {}
        self.resolved_count = 0

    async def resolve(
        self,
        session: AsyncSession,
        model: Type[Base],
        name: Optional[str],
    ) -> Optional[int]:
        """
        Return the id of the row named ``name``, creating it if needed.

        Empty or missing names resolve to ``None``.
        """
        if name is None:
            return None
        name = name.strip()
        if not name:
            return None

        key = (model.__tablename__, name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        insert = dialect_insert(session)
        stmt = insert(model).values(name=name)
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={"name": stmt.excluded["name"]},
        ).returning(model.id)

        row_id = (await session.execute(stmt)).scalar_one()
        self._cache[key] = row_id
        self.resolved_count += 1

        logger.debug("Resolved reference", table=model.__tablename__, name=name, id=row_id)
        return row_id
