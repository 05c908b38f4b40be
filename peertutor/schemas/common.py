from typing import Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

from peertutor.core import config

T = TypeVar("T")


class PageRequest(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=config.DEFAULT_PAGE_SIZE, ge=1)

    @field_validator("page_size")
    @classmethod
    def cap_page_size(cls, value: int) -> int:
        return min(value, config.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Page(BaseModel, Generic[T]):
    items: list[T]
    total_count: int
    page: int
    page_size: int
