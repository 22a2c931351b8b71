"""
buildmanifest - build provenance attributes for artifact manifests.

Computes the key/value attributes embedded into a packaged artifact's
manifest: implementation identity, build environment, source-control
state, user-declared attributes and a runtime Class-Path.

Example usage:
    from pathlib import Path
    from buildmanifest import ManifestFacts, ManifestOptions, ProjectIdentity, fill_attributes

    facts = ManifestFacts.from_environment(
        ProjectIdentity(name="app", group="com.acme", version="1.0.0"),
        project_dir=Path("."),
        dependencies=["build/libs/core.jar"],
    )
    attributes = fill_attributes({}, facts, ManifestOptions(classpath_prefix="lib"))
    # attributes["Implementation-Title"] == "app"
    # attributes["Class-Path"] == "lib/core.jar"
"""

__version__ = "0.1.0"
__all__ = [
    "fill_attributes",
    "generate_attributes",
    "ManifestFacts",
    "ManifestOptions",
    "ProjectIdentity",
    "lazy",
    "__version__",
]


# Lazy imports keep `import buildmanifest` free of pydantic at import time
def __getattr__(name: str):
    if name in ("fill_attributes", "generate_attributes"):
        from buildmanifest import attributes
        return getattr(attributes, name)
    if name == "ManifestFacts":
        from buildmanifest.facts import ManifestFacts
        return ManifestFacts
    if name in ("ManifestOptions", "ProjectIdentity"):
        from buildmanifest import models
        return getattr(models, name)
    if name == "lazy":
        from buildmanifest.lazy import lazy
        return lazy
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
