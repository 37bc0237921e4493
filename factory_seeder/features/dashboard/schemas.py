"""Pydantic schemas for the factory dashboard."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from factory_seeder.core.config import Strategy


class GenerateRequest(BaseModel):
    """Body of ``POST /factory/{name}/generate``.

    Omitted ``count`` and ``strategy`` fall back to the environment defaults.
    """

    count: int | None = Field(
        default=None,
        ge=1,
        le=10_000,
        description="Number of records to generate",
    )
    traits: list[str] = Field(
        default_factory=list,
        description="Trait names applied to every record",
    )
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        description="Attribute overrides passed to the factory",
    )
    strategy: Strategy | None = Field(
        default=None,
        description="create persists records, build only constructs them",
    )

    @field_validator("traits", mode="before")
    @classmethod
    def split_traits(cls, v: Any) -> Any:
        """Accept ``"admin, verified"`` as well as a list."""
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v

    @field_validator("attributes")
    @classmethod
    def drop_blank_attributes(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Form fields left empty are not overrides."""
        return {k: val for k, val in v.items() if val is not None and val != ""}


class GenerateResult(BaseModel):
    """Counts and errors of a generation run."""

    factory: str
    requested_count: int
    count: int
    strategy: Strategy
    traits: list[str]
    attributes: dict[str, Any]
    stripped_attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Attribute keys removed because they name collection associations",
    )
    errors: list[str]
    records: list[str] = Field(description="Short description of each generated record")


class GenerateResponse(BaseModel):
    """Structured answer of a mutating dashboard endpoint."""

    success: bool
    message: str
    result: GenerateResult | None = None
    log_id: str = Field(description="Key for fetching the execution log on the detail page")
    redirect_url: str = Field(description="Detail page showing the logs and flash message")
