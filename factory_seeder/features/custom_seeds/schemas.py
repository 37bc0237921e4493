"""Pydantic schemas for custom seed runs."""

from typing import Any

from pydantic import BaseModel, Field


class RunSeedRequest(BaseModel):
    """Body of ``POST /custom_seeds/{name}/generate``.

    Values may be raw form strings; they are coerced to the declared
    parameter types before validation.
    """

    arguments: dict[str, Any] = Field(default_factory=dict, description="Seed arguments")


class RunSeedResponse(BaseModel):
    success: bool
    message: str
    result: Any = Field(default=None, description="Whatever the seed returned, JSON encoded")
    error: str | None = None
    log_id: str
    redirect_url: str


class SeedSummary(BaseModel):
    """A seed as listed by the JSON API."""

    name: str
    description: str
    parameters: dict[str, dict[str, Any]]
    metadata: dict[str, Any]
    created_at: str
    has_parameters: bool
