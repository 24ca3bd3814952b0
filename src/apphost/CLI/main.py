"""
Command Line Interface for apphost.
"""
import logging
import os
import sys

import click

from ..CONFIG.settings import load_settings
from ..CONVERTERS.to_compose import ComposeConverter
from ..PARSERS.manifest_parser import ManifestParser
from ..PUBLISHERS.manifest_publisher import ManifestPublisher
from ..RUNNERS.dependency_resolver import DependencyResolver
from ..SAMPLES.playground import build_playground
from ..VALIDATORS.manifest_validator import ManifestValidator
from ..exceptions import ManifestError


@click.group()
@click.option('--env-file', '-e', multiple=True, help='.env file with APPHOST_* settings')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, env_file, verbose):
    """
    apphost - describe distributed applications and their deployment manifests.

    Publishes, validates and converts manifests for SurrealDB-backed topologies.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj['settings'] = load_settings(env_files=list(env_file))


def _load(path):
    return ManifestParser().parse(path)


@cli.command('publish-playground')
@click.option('--out', '-o', default=None, help='Manifest output path')
@click.pass_context
def publish_playground(ctx, out):
    """Write the playground manifest."""
    settings = ctx.obj['settings']
    out = out or settings.manifest_path
    model = build_playground(settings)
    ManifestPublisher(model).publish(out)
    click.echo(f"Manifest written to {out}")


@cli.command()
@click.argument('manifest', type=click.Path())
def validate(manifest):
    """Check a manifest against the schema and its references."""
    try:
        issues = ManifestValidator().validate(_load(manifest))
    except ManifestError as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    if issues:
        for issue in issues:
            click.echo(f"Invalid: {issue}")
        sys.exit(1)
    click.echo(f"{manifest} is valid.")


@cli.command()
@click.argument('manifest', type=click.Path())
def show(manifest):
    """List resources in dependency order."""
    try:
        parsed = _load(manifest)
        order = DependencyResolver().resolve_order(parsed)
    except ManifestError as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    click.echo(f"{'RESOURCE':25} {'TYPE':15}")
    click.echo("-" * 40)
    for name in order:
        click.echo(f"{name:25} {parsed.resources[name].type:15}")


@cli.command()
@click.argument('manifest', type=click.Path())
@click.option('--out', '-o', default='compose', help='Output directory')
def convert(manifest, out):
    """Convert a manifest to docker-compose files"""
    try:
        parsed = _load(manifest)
        ComposeConverter(parsed, manifest_dir=os.path.dirname(os.path.abspath(manifest))).convert(out)
    except ManifestError as e:
        click.echo(f"Error: {e}")
        sys.exit(1)
    click.echo(f"Compose files generated in {out}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
