"""Domain entities describing a business site and its editable copy."""
from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

TemplateId = Literal["culinary", "fashion", "service"]
ProjectStatus = Literal["draft", "publishing", "published"]

TEMPLATE_IDS: tuple[str, ...] = get_args(TemplateId)


class AnalysisResult(BaseModel):
    """Editable copy suggested for a site; snapshots of it form the edit history."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    business_name_suggestion: str
    headline: str
    story: str
    suggested_template: TemplateId
    location_suggestion: str | None = None

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Project(BaseModel):
    """Persisted record of one business site."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    business_name: str
    image_ref: str = Field(default="", alias="imageUrl")
    headline: str
    story: str
    phone: str = ""
    location: str | None = None
    template_id: TemplateId = "service"
    status: ProjectStatus = "draft"
    published_url: str | None = None
    repo_url: str | None = None
    created_at: int = Field(ge=0)

    @model_validator(mode="after")
    def _published_requires_url(self) -> "Project":
        if self.status == "published" and not self.published_url:
            raise ValueError("a published project must have a published_url")
        return self

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_analysis(self) -> AnalysisResult:
        """Project fields as the editable payload used to seed the history."""

        return AnalysisResult(
            business_name_suggestion=self.business_name,
            headline=self.headline,
            story=self.story,
            suggested_template=self.template_id,
        )
