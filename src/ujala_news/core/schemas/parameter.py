from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ujala_news.core.config import settings


class PaginationParams(BaseModel):
    """
    Pagination schema for list endpoints.

    Examples
    --------
    Default initialization::

        >>> params = PaginationParams(limit=20)
        >>> params.get_offset()
        0

    Page-based offset calculation::

        >>> params = PaginationParams(page=3, limit=10)
        >>> params.get_offset()
        20
    """

    model_config = ConfigDict(
        populate_by_name=True,
        # Extra query params must not cause validation errors
        extra="ignore",
    )
    limit: Annotated[
        int,
        Field(default=settings.DEFAULT_LIST_PER_PAGE, description="Items per page"),
    ]

    page: Annotated[int | None, Field(default=None, description="1-indexed page number")]

    offset: Annotated[int, Field(default=0, description="Raw skip count")]

    @model_validator(mode="after")
    def _validate_bounds(self) -> Self:
        """
        Clamps values to system limits.

        >>> PaginationParams(limit=9999).limit  # if max is 100
        100
        """
        self.limit = max(settings.MIN_LIST_PER_PAGE, min(self.limit, settings.MAX_API_LIMIT))
        self.offset = max(0, self.offset)
        return self

    @property
    def current_page(self) -> int:
        if self.page is not None and self.page > 0:
            return self.page
        return self.offset // self.limit + 1

    def get_offset(self) -> int:
        """
        Effective database offset. Page takes precedence over offset.

        >>> PaginationParams(page=2, limit=20).get_offset()
        20
        """
        if self.page is not None and self.page > 0:
            return (self.page - 1) * self.limit
        return self.offset
