from typing import Literal

from pydantic import BaseModel, Field


class ListingRules(BaseModel):
    order: Literal["creation", "tier"] = "creation"


class SlugRules(BaseModel):
    max_length: int | None = Field(default=None, ge=1)
    fallback: str = Field(default="post", pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class CreateRules(BaseModel):
    conflict_retries: int = Field(default=1, ge=0)


class Rules(BaseModel):
    listing: ListingRules = Field(default_factory=ListingRules)
    slug: SlugRules = Field(default_factory=SlugRules)
    create: CreateRules = Field(default_factory=CreateRules)
