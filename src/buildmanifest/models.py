"""
Data models for manifest attribute generation.

ProjectIdentity describes the artifact being packaged, ManifestOptions
holds the user-facing switches that shape the attribute set, and
CommitInfo is the head-commit snapshot read from source control.

Options accept both snake_case field names and the camelCase names used
in options files:

    implementationAttributes: true
    buildAttributes: true
    scmAttributes: false
    classpathPrefix: lib
    attributes:
      Team: platform
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectIdentity(BaseModel):
    """Identity fields of the project producing the artifact."""

    name: str = Field(..., description="Project name")
    group: Optional[str] = Field(None, description="Project group / organisation")
    version: Optional[str] = Field(None, description="Project version")
    archives_base_name: Optional[str] = Field(
        None,
        alias="archivesBaseName",
        description="Explicit archive base name; takes precedence over name for the title",
    )
    main_class: Optional[str] = Field(
        None, alias="mainClass", description="Declared entry point, if any"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def title(self) -> str:
        """Implementation title: archive base name, falling back to project name."""
        return self.archives_base_name or self.name


class ManifestOptions(BaseModel):
    """
    Switches controlling which attribute groups are computed.

    Set once per invocation and never mutated during a merge.
    """

    implementation_attributes: bool = Field(
        True,
        alias="implementationAttributes",
        description="Compute Implementation-Title/Group/Version",
    )
    build_attributes: bool = Field(
        True,
        alias="buildAttributes",
        description="Compute Built-By/Host/Date/OS/Runtime",
    )
    scm_attributes: bool = Field(
        True,
        alias="scmAttributes",
        description="Compute SCM-* attributes from the project repository",
    )
    attributes: Dict[Any, Any] = Field(
        default_factory=dict,
        description="Custom attributes; override computed defaults. Entries "
        "with a non-string or blank name, or a None value, are skipped",
    )
    classpath_prefix: Optional[str] = Field(
        None,
        alias="classpathPrefix",
        description="When set, Class-Path is computed with this prefix",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("attributes", mode="before")
    @classmethod
    def empty_attributes(cls, v: Any) -> Any:
        """An empty `attributes:` section means no custom attributes."""
        return {} if v is None else v

    def merged_with(self, **overrides: Any) -> "ManifestOptions":
        """Return a copy with non-None overrides applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return self.model_copy(update=updates)


class CommitInfo(BaseModel):
    """Head commit facts read from the repository."""

    hash: str = Field(..., description="Full commit hash")
    short_message: str = Field("", alias="shortMessage", description="Subject line")
    author_name: str = Field("", alias="authorName")
    author_email: str = Field("", alias="authorEmail")
    authored_at: datetime = Field(..., alias="authoredAt")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def author(self) -> str:
        """Author identity formatted as "name <email>"."""
        return f"{self.author_name.strip()} <{self.author_email.strip()}>"
