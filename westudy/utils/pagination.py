from typing import List, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy.orm import Query

from westudy.schemas.common import PaginatedResponse


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def paginate(query: Query, page: int, limit: int) -> Tuple[List, int]:
    """Run a count plus one offset/limit slice of an already ordered query."""
    total = query.count()
    items = query.offset(offset_for(page, limit)).limit(limit).all()
    return items, total


def page_response(
    items: List,
    total: int,
    page: int,
    limit: int,
    schema: Optional[Type[BaseModel]] = None,
) -> PaginatedResponse:
    """Wrap one page of rows; ORM rows are converted through `schema`."""
    if schema is not None:
        items = [schema.model_validate(item) for item in items]
        return PaginatedResponse[schema](
            data=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=-(-total // limit) if total else 0,
        )
    return PaginatedResponse(
        data=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )
