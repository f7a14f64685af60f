"""Shared field types for spec entities and their array items."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

Priority = Literal["critical", "high", "medium", "low", "nice-to-have"]
Importance = Literal["low", "medium", "high", "critical"]

TaskId = Annotated[str, Field(pattern=r"^tsk-\d{3}$")]
CriteriaId = Annotated[str, Field(pattern=r"^crt-\d{3}$")]
TestCaseId = Annotated[str, Field(pattern=r"^tst-\d{3}$")]
FlowId = Annotated[str, Field(pattern=r"^flw-\d{3}$")]
FlowStepId = Annotated[str, Field(pattern=r"^step-\d{3}$")]
ApiContractId = Annotated[str, Field(pattern=r"^api-\d{3}$")]
DataModelId = Annotated[str, Field(pattern=r"^dat-\d{3}$")]
ArticleId = Annotated[str, Field(pattern=r"^art-\d{3}$")]
TaskFileId = Annotated[str, Field(pattern=r"^file-\d{3}$")]

PlanRef = Annotated[str, Field(pattern=r"^pln-\d{3}(-[a-z0-9-]+)?$")]
ComponentRef = Annotated[str, Field(pattern=r"^cmp-\d{3}(-[a-z0-9-]+)?$")]
MilestoneRef = Annotated[str, Field(pattern=r"^mls-\d{3}(-[a-z0-9-]+)?$")]
DecisionRef = Annotated[str, Field(pattern=r"^dec-\d{3}(-[a-z0-9-]+)?$")]
RequirementRef = Annotated[str, Field(pattern=r"^(brd|prd)-\d{3}(-[a-z0-9-]+)?$")]

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat().replace("+00:00", "Z")


class SpecModel(BaseModel):
    """Base for every persisted model: unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


class SupersessionMixin(SpecModel):
    """Version-chain fields carried by supersedable array items."""

    supersedes: Optional[str] = Field(None, description="ID of the item this replaces (if any)")
    superseded_by: Optional[str] = Field(None, description="ID of the item that replaces this (if superseded)")
    superseded_at: Optional[datetime] = Field(None, description="Timestamp when this item was superseded")


class _ReferenceBase(SpecModel):
    name: str = Field(..., min_length=1, description="A short, descriptive name for the reference")
    description: str = Field(..., min_length=1, description="A brief description of the contents of the reference")
    importance: Importance = Field("medium", description="The importance level of this reference")


class UrlReference(_ReferenceBase):
    type: Literal["url"] = "url"
    url: str
    mime_type: Optional[str] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("url must be an absolute URL such as https://example.com/docs")
        return v


class DocumentationReference(_ReferenceBase):
    type: Literal["documentation"] = "documentation"
    library: str = Field(..., min_length=1)
    search_term: str = Field(..., min_length=1)


class FileReference(_ReferenceBase):
    type: Literal["file"] = "file"
    path: str = Field(..., min_length=1)


class CodeReference(_ReferenceBase):
    type: Literal["code"] = "code"
    code: str = Field(..., min_length=1, description="The code snippet or example")
    language: Optional[str] = Field(None, description="Programming language of the code")


class OtherReference(_ReferenceBase):
    type: Literal["other"] = "other"


Reference = Annotated[
    Union[UrlReference, DocumentationReference, FileReference, CodeReference, OtherReference],
    Field(discriminator="type"),
]


class ScopeItem(SpecModel):
    type: Literal["in-scope", "out-of-scope"]
    description: str = Field(..., min_length=1, description="What this scope item includes or excludes")
    rationale: Optional[str] = Field(None, description="Why this item is in or out of scope")


def validate_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not _EMAIL.match(value):
        raise ValueError("email must look like name@domain.tld")
    return value


def format_validation_errors(exc: ValidationError) -> List[str]:
    """Render pydantic errors as ``"path: message"`` strings."""
    rendered = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err.get("loc", ()))
        rendered.append(f"{path}: {err['msg']}" if path else err["msg"])
    return rendered
