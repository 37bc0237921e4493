"""Pydantic schemas for the JSON API."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class AssociationSchema(BaseModel):
    name: str
    factory: str
    strategy: str
    kind: Literal["sub_factory", "related"]


class AttributeSchema(BaseModel):
    name: str
    type: str = Field(description="Declaration kind (sequence, faker, lazyfunction, static, ...)")


class FactorySchema(BaseModel):
    """Introspected factory."""

    name: str
    class_name: str
    model: str | None = None
    traits: list[str]
    associations: list[AssociationSchema]
    attributes: list[AttributeSchema]


class PreviewRecord(BaseModel):
    index: int
    attributes: dict[str, Any] | None = None
    associations: dict[str, Any] | None = None
    error: str | None = None


class PreviewData(BaseModel):
    factory: str
    count: int
    traits: list[str]
    attributes: dict[str, Any]
    preview: list[PreviewRecord]


class PreviewResponse(BaseModel):
    success: Literal[True] = True
    preview: PreviewData


class ApiErrorResponse(BaseModel):
    """Failure shape of the preview endpoint."""

    success: Literal[False] = False
    error: str
