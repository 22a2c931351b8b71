"""
Manifest attribute merge engine.

Combines the output of all attribute sources into a destination
attribute set:

1. Sources are evaluated in a fixed order; a later source overwrites an
   earlier one on key collision.
2. Keys already present in the destination are never touched.
3. Remaining values are stringified (running deferred values), trimmed,
   and dropped when blank.
4. Survivors are written into the destination in one pass.

Usage:
    from buildmanifest.attributes import fill_attributes
    from buildmanifest.facts import ManifestFacts
    from buildmanifest.models import ManifestOptions, ProjectIdentity

    facts = ManifestFacts.from_environment(
        ProjectIdentity(name="app", group="com.acme", version="1.0.0"),
        project_dir=Path("."),
    )
    manifest = {"Created-By": "ci"}
    fill_attributes(manifest, facts, ManifestOptions(classpath_prefix="lib"))

Metadata is best-effort: nothing computed here may fail the build. The
only reported failure is one INFO log record per unavailable source.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, MutableMapping, Optional

from buildmanifest.facts import ManifestFacts
from buildmanifest.models import ManifestOptions
from buildmanifest.providers import Unavailable, build_sources

logger = logging.getLogger(__name__)


def _final_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def collect_candidates(
    facts: ManifestFacts,
    options: ManifestOptions,
    log: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """Union of all enabled source outputs, later sources winning."""
    log = log or logger
    candidates: Dict[str, Any] = {}
    for source in build_sources(options):
        result = source.compute(facts, options)
        if isinstance(result, Unavailable):
            log.info(
                "Could not resolve manifest %s attributes. Using fallback. (%s)",
                source.name.upper(),
                result.reason,
                exc_info=result.error,
            )
            continue
        candidates.update(result.attributes)
    return candidates


def fill_attributes(
    destination: MutableMapping[str, str],
    facts: ManifestFacts,
    options: Optional[ManifestOptions] = None,
    log: Optional[logging.Logger] = None,
) -> MutableMapping[str, str]:
    """
    Add computed attributes to destination without overwriting.

    Args:
        destination: Pre-seeded attribute set, mutated in place
        facts: Snapshot of host, project and repository facts
        options: Toggles, custom attributes and classpath prefix
        log: Logger receiving unavailable-source records

    Returns:
        The destination itself
    """
    options = options or ManifestOptions()
    candidates = collect_candidates(facts, options, log)

    generated: Dict[str, str] = {}
    for key, value in candidates.items():
        if key in destination:
            continue
        text = _final_value(value)
        if text is not None:
            generated[key] = text

    destination.update(generated)
    return destination


def generate_attributes(
    facts: ManifestFacts,
    options: Optional[ManifestOptions] = None,
    log: Optional[logging.Logger] = None,
) -> Dict[str, str]:
    """Compute attributes into a fresh, empty destination."""
    return fill_attributes({}, facts, options, log)
