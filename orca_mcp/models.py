"""Typed views over the HUNT v0.2 response payload."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

MAX_HUNT_DOCUMENTS = 100


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class HuntDataset(_WireModel):
    """Provenance of a matched record."""

    authorities: list[str] = Field(default_factory=list)
    section: str | None = None
    exact_list_name: str | None = Field(default=None, alias="exactListName")
    implementing_organization: str | None = Field(default=None, alias="implementingOrganization")

    @field_validator("authorities", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class TabularData(_WireModel):
    headers: list[str] = Field(default_factory=list)
    field_values: list[str] = Field(default_factory=list, alias="fields")

    @field_validator("headers", "field_values", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class HuntDocument(_WireModel):
    """One matched record: identity, names, free text and dataset."""

    dataset_id: str | None = Field(default=None, alias="datasetId")
    id: str | None = None
    names: list[str] = Field(default_factory=list)
    primary_name: str | None = Field(default=None, alias="primaryName")
    raw_data: str | None = Field(default=None, alias="rawData")
    values: list[str] = Field(default_factory=list)
    dataset: HuntDataset | None = None
    tabular_data: TabularData | None = Field(default=None, alias="tabularData")

    @field_validator("names", "values", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class HuntSearchResult(_WireModel):
    """A page of HUNT results."""

    query: str
    next_token: str | None = Field(default=None, alias="nextToken")
    hunt_documents: list[HuntDocument] = Field(
        default_factory=list,
        alias="huntDocuments",
        max_length=MAX_HUNT_DOCUMENTS,
    )

    @field_validator("hunt_documents", mode="before")
    @classmethod
    def _cap_documents(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list) and len(value) > MAX_HUNT_DOCUMENTS:
            logger.warning(
                "HUNT response exceeded the document cap; truncating",
                extra={"received": len(value), "limit": MAX_HUNT_DOCUMENTS},
            )
            return value[:MAX_HUNT_DOCUMENTS]
        return value

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the upstream wire shape."""
        return self.model_dump(mode="json", by_alias=True)
