import math

from blogcore.schemas.pagination_schema import PaginationDto, PaginationModel


def paginate(query, pagination: PaginationModel):
    """Slice a query to the requested page. Pages past the end come back empty."""
    return query.offset((pagination.page - 1) * pagination.size).limit(pagination.size)


def to_pagination_dto(pagination: PaginationModel, total_count: int) -> PaginationDto:
    return PaginationDto(
        size=pagination.size,
        count=math.ceil(total_count / pagination.size),
        current=pagination.page,
        total=total_count,
    )
