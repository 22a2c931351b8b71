"""
Attribute source providers.

Each provider reads one domain of facts and returns a SourceResult:
either a Contribution carrying a partial attribute map, or Unavailable
with the reason the source could not be read. Providers never raise for
a missing fact; single values degrade to "" and whole sources degrade to
Unavailable.

Merge order (later wins on key collision):
    main class -> implementation -> build -> scm -> custom -> classpath
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any, Callable, Dict, List, Optional, Union

from buildmanifest.constants import (
    BUILT_BY,
    BUILT_DATE,
    BUILT_HOST,
    BUILT_OS,
    BUILT_RUNTIME,
    CLASS_PATH,
    IMPLEMENTATION_GROUP,
    IMPLEMENTATION_TITLE,
    IMPLEMENTATION_VERSION,
    MAIN_CLASS,
    SCM_BRANCH,
    SCM_COMMIT_AUTHOR,
    SCM_COMMIT_DATE,
    SCM_COMMIT_HASH,
    SCM_COMMIT_MESSAGE,
    SCM_REPOSITORY,
)
from buildmanifest.facts import ManifestFacts, PropertyReader
from buildmanifest.lazy import lazy, or_empty
from buildmanifest.models import ManifestOptions

AttributeMap = Dict[str, Any]


@dataclass(frozen=True)
class Contribution:
    """Attributes produced by a source."""

    attributes: AttributeMap = field(default_factory=dict)


@dataclass(frozen=True)
class Unavailable:
    """A source that could not be read; contributes nothing."""

    reason: str
    error: Optional[BaseException] = None


SourceResult = Union[Contribution, Unavailable]
Provider = Callable[[ManifestFacts, ManifestOptions], SourceResult]


@dataclass(frozen=True)
class AttributeSource:
    """A named, independently toggleable provider."""

    name: str
    provider: Provider
    enabled: bool = True

    def compute(self, facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
        if not self.enabled:
            return Contribution()
        return self.provider(facts, options)


def format_instant(instant: datetime) -> str:
    """UTC instant truncated to seconds, e.g. 2024-05-01T10:20:30Z."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def join_properties(properties: PropertyReader, *names: str) -> str:
    """Join non-blank property values with single spaces."""
    values = []
    for name in names:
        value = or_empty(lambda: properties(name)).strip()
        if value:
            values.append(value)
    return " ".join(values)


def main_class_attributes(facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
    return Contribution({MAIN_CLASS: or_empty(lambda: facts.project.main_class)})


def implementation_attributes(facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
    project = facts.project
    return Contribution({
        IMPLEMENTATION_TITLE: lazy(lambda: project.title),
        IMPLEMENTATION_GROUP: lazy(lambda: project.group),
        IMPLEMENTATION_VERSION: lazy(lambda: project.version),
    })


def build_attributes(facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
    return Contribution({
        BUILT_BY: join_properties(facts.properties, "user.name"),
        BUILT_HOST: or_empty(facts.host_name_resolver),
        BUILT_DATE: or_empty(lambda: format_instant(facts.clock())),
        BUILT_OS: join_properties(facts.properties, "os.name", "os.version", "os.arch"),
        BUILT_RUNTIME: join_properties(
            facts.properties, "python.version", "python.implementation"
        ),
    })


def scm_attributes(facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
    """
    Read head commit, branch and remote from the project repository.

    Values are resolved eagerly while the repository is open; the handle
    is released before returning. Any failure makes the whole source
    Unavailable.
    """
    try:
        with facts.open_repository(facts.project_dir) as repo:
            head = repo.head_commit()
            return Contribution({
                SCM_REPOSITORY: or_empty(repo.remote_url),
                SCM_BRANCH: or_empty(repo.full_branch),
                SCM_COMMIT_MESSAGE: or_empty(lambda: head.short_message),
                SCM_COMMIT_HASH: or_empty(lambda: head.hash),
                SCM_COMMIT_AUTHOR: or_empty(lambda: head.author),
                SCM_COMMIT_DATE: or_empty(lambda: format_instant(head.authored_at)),
            })
    except Exception as e:
        return Unavailable(reason=f"{type(e).__name__}: {e}", error=e)


def custom_attributes(facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
    """User-declared attributes; blank names and None values are skipped."""
    attributes: AttributeMap = {}
    for name, value in options.attributes.items():
        if not isinstance(name, str) or not name.strip() or value is None:
            continue
        if isinstance(value, str):
            attributes[name] = value
        else:
            attributes[name] = lazy(lambda value=value: value)
    return Contribution(attributes)


_MULTI_SLASH = re.compile(r"/{2,}")


def classpath_entry(prefix: str, dependency: str) -> str:
    """Join prefix and a dependency's file name into a forward-slash path."""
    file_name = PurePath(dependency).name or dependency
    path = "/".join(part for part in (prefix, file_name) if part)
    return _MULTI_SLASH.sub("/", path.replace("\\", "/"))


def classpath_attributes(facts: ManifestFacts, options: ManifestOptions) -> SourceResult:
    prefix = options.classpath_prefix
    if prefix is None:
        return Contribution()
    entries = [classpath_entry(prefix, dep) for dep in facts.dependencies]
    return Contribution({CLASS_PATH: " ".join(entries)})


def build_sources(options: ManifestOptions) -> List[AttributeSource]:
    """Sources in merge order, with toggles applied. Built fresh per merge."""
    return [
        AttributeSource("main-class", main_class_attributes),
        AttributeSource(
            "implementation",
            implementation_attributes,
            enabled=options.implementation_attributes,
        ),
        AttributeSource("build", build_attributes, enabled=options.build_attributes),
        AttributeSource("scm", scm_attributes, enabled=options.scm_attributes),
        AttributeSource("custom", custom_attributes),
        AttributeSource("classpath", classpath_attributes),
    ]
