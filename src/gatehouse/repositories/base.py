"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from src.gatehouse.schemas.pagination import Page, PageRequest, encode_cursor

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common database operations.

    Repositories handle data access only. Transaction control (commit)
    should be done in the service layer.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get a record by its primary key."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def paginate(self, query: Any, page: PageRequest) -> Page[ModelType]:
        """Execute cursor-based pagination on a query, ordered by id.

        Args:
            query: The base SQLAlchemy query to paginate
            page: Cursor and size arguments

        Returns:
            Page of results in ascending id order, whichever direction was requested.
        """
        id_field = self.model.id  # type: ignore[attr-defined]
        skip_id = page.skip_id
        limit = page.limit

        if page.backwards:
            if skip_id is not None:
                query = query.where(id_field < skip_id)
            query = query.order_by(id_field.desc())
        else:
            if skip_id is not None:
                query = query.where(id_field > skip_id)
            query = query.order_by(id_field.asc())

        # Fetch limit + 1 to determine if there are more results
        result = await self.session.execute(query.limit(limit + 1))
        items = list(result.scalars().all())

        has_more = len(items) > limit
        if has_more:
            items = items[:limit]

        if page.backwards:
            items.reverse()
            has_next_page, has_previous_page = skip_id is not None, has_more
        else:
            has_next_page, has_previous_page = has_more, skip_id is not None

        return Page(
            items=items,
            start_cursor=encode_cursor(items[0].id) if items else None,  # type: ignore[attr-defined]
            end_cursor=encode_cursor(items[-1].id) if items else None,  # type: ignore[attr-defined]
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
        )
