"""
buildmanifest CLI - compute manifest attributes for a project.

Commands:
    buildmanifest generate   Compute attributes and print them

Usage:
    buildmanifest generate --name app --group com.acme --version 1.2.0
    buildmanifest generate --classpath-prefix lib --dependency build/libs/a.jar
    buildmanifest generate --attribute Team=platform --no-scm-attributes --format json
    buildmanifest generate --preset Created-By=ci --output build/manifest.json
"""

import json
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
import yaml

from buildmanifest.attributes import fill_attributes
from buildmanifest.config import OptionsFileError, get_config, load_options
from buildmanifest.facts import ManifestFacts
from buildmanifest.logger import configure_logging
from buildmanifest.models import ProjectIdentity


def _parse_pairs(values: Tuple[str, ...], param_hint: str) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options, keeping order."""
    pairs: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(
                f"expected KEY=VALUE, got {item!r}", param_hint=param_hint
            )
        pairs[key.strip()] = value
    return pairs


def render_attributes(attributes: Dict[str, str], fmt: str) -> str:
    """Render the attribute set for inspection."""
    if fmt == "json":
        return json.dumps(attributes, indent=2)
    if fmt == "yaml":
        return yaml.dump(attributes, default_flow_style=False, sort_keys=False)
    return "".join(f"{key}: {value}\n" for key, value in attributes.items())


@click.group()
@click.version_option(package_name="buildmanifest")
def main():
    """buildmanifest - build provenance attributes for artifact manifests."""
    pass


@main.command()
@click.option("--project-dir", type=click.Path(file_okay=False, path_type=Path),
              default=Path("."), show_default=True, help="Project root (repository location)")
@click.option("--name", help="Project name (defaults to the project directory name)")
@click.option("--group", help="Project group")
@click.option("--version", "project_version", help="Project version")
@click.option("--archives-base-name", help="Archive base name used for Implementation-Title")
@click.option("--main-class", help="Entry point written as Main-Class")
@click.option("--dependency", "dependencies", multiple=True,
              help="Runtime dependency file, in classpath order (repeatable)")
@click.option("--classpath-prefix", help="Compute Class-Path with this prefix")
@click.option("--attribute", "custom", multiple=True, help="Custom attribute KEY=VALUE (repeatable)")
@click.option("--preset", multiple=True,
              help="Pre-existing attribute KEY=VALUE, never overwritten (repeatable)")
@click.option("--implementation-attributes/--no-implementation-attributes", default=None,
              help="Toggle Implementation-* attributes")
@click.option("--build-attributes/--no-build-attributes", default=None,
              help="Toggle Built-* attributes")
@click.option("--scm-attributes/--no-scm-attributes", default=None,
              help="Toggle SCM-* attributes")
@click.option("--options-file", type=click.Path(dir_okay=False, path_type=Path),
              help="YAML options file (default: .buildmanifest.yaml in the project dir)")
@click.option("--format", "output_format", type=click.Choice(["text", "json", "yaml"]),
              default="text", show_default=True, help="Output format")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Write to file instead of stdout")
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]),
              help="Override configured log level")
def generate(
    project_dir: Path,
    name: Optional[str],
    group: Optional[str],
    project_version: Optional[str],
    archives_base_name: Optional[str],
    main_class: Optional[str],
    dependencies: Tuple[str, ...],
    classpath_prefix: Optional[str],
    custom: Tuple[str, ...],
    preset: Tuple[str, ...],
    implementation_attributes: Optional[bool],
    build_attributes: Optional[bool],
    scm_attributes: Optional[bool],
    options_file: Optional[Path],
    output_format: str,
    output: Optional[Path],
    log_level: Optional[str],
):
    """Compute manifest attributes for a project."""
    config = get_config()
    configure_logging(log_level or config.log_level, config.log_format)

    project_dir = project_dir.resolve()
    custom_pairs = _parse_pairs(custom, "--attribute")
    destination = _parse_pairs(preset, "--preset")

    try:
        options = load_options(options_file or project_dir / config.options_file)
    except OptionsFileError as e:
        raise click.ClickException(str(e))

    options = options.merged_with(
        implementation_attributes=implementation_attributes,
        build_attributes=build_attributes,
        scm_attributes=scm_attributes,
        classpath_prefix=classpath_prefix,
        attributes={**options.attributes, **custom_pairs} if custom_pairs else None,
    )

    project = ProjectIdentity(
        name=name or project_dir.name,
        group=group,
        version=project_version,
        archives_base_name=archives_base_name,
        main_class=main_class,
    )
    facts = ManifestFacts.from_environment(
        project,
        project_dir=project_dir,
        dependencies=dependencies,
        git_executable=config.git_executable,
        git_timeout_s=config.git_timeout_s,
    )

    fill_attributes(destination, facts, options)
    rendered = render_attributes(destination, output_format)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
        click.echo(f"Wrote {len(destination)} attributes to {output}", err=True)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
