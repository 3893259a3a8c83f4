"""Click CLI commands for ifcgeojson."""

import logging

import click

from .builder import GeoJsonBuilder
from .features import error_document, write_geojson
from .models import ConversionOptions, Projection, RangePolicy
from .providers import open_provider

logger = logging.getLogger(__name__)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log per-triangle diagnostics')
def cli(verbose: bool):
    """Convert triangulated building elements to GeoJSON."""
    if verbose:
        logging.getLogger('ifcgeojson').setLevel(logging.DEBUG)


@cli.command()
@click.argument('model_path', type=click.Path(dir_okay=False))
@click.argument('output', type=click.Path(dir_okay=False))
@click.argument('element_guid', required=False)
@click.option('--kind', type=click.Choice(['auto', 'ifc', 'mesh']), default='auto',
              help='Model reader (auto picks by file suffix)')
@click.option('--projection', type=click.Choice([p.value for p in Projection]),
              default=None, help='Planar projection strategy')
@click.option('--range-policy', type=click.Choice([r.value for r in RangePolicy]),
              default=None, help='How out-of-range coordinates are normalised')
@click.option('--elevation/--no-elevation', default=None,
              help='Keep vertex z as a third coordinate')
@click.option('--scale', type=float, default=None, help='Model units → degrees factor')
@click.option('--drop-axis', type=click.Choice(['x', 'y', 'z']), default=None,
              help='Axis discarded by the axis-drop projection')
@click.option('--rfc7946', is_flag=True,
              help='Wrap single-ring polygons as standard GeoJSON')
@click.option('--workers', '-j', type=int, default=None, help='Worker threads')
def convert(model_path: str, output: str, element_guid, kind: str, projection,
            range_policy, elevation, scale, drop_axis, rfc7946, workers):
    """Convert MODEL_PATH to a GeoJSON FeatureCollection at OUTPUT.

    With ELEMENT_GUID only that element is converted; an unknown id aborts
    the run.
    """
    try:
        options = ConversionOptions.from_env(
            projection=projection, range_policy=range_policy,
            include_elevation=elevation, scale=scale, drop_axis=drop_axis,
            rfc7946=rfc7946, workers=workers)
        provider = open_provider(model_path, kind=kind)
        builder = GeoJsonBuilder(provider, options)
        if element_guid:
            document = builder.process_single(element_guid)
        else:
            document = builder.process_all()
        write_geojson(document, output)
        logger.info(f"Successfully created GeoJSON at: {output}")
    except Exception as e:
        logger.error(f"Conversion failed: {e}")
        write_geojson(error_document(e), output)
        raise click.ClickException(str(e))


@cli.command()
@click.argument('model_path', type=click.Path(dir_okay=False))
@click.option('--kind', type=click.Choice(['auto', 'ifc', 'mesh']), default='auto')
def elements(model_path: str, kind: str):
    """List the convertible elements of MODEL_PATH."""
    try:
        provider = open_provider(model_path, kind=kind)
    except Exception as e:
        logger.error(f"Error opening model: {e}")
        raise click.ClickException(str(e))

    listed = provider.list_elements()
    for element in listed:
        click.echo(f"{element.element_id}\t{element.type_label}")
    click.echo(f"{len(listed)} elements", err=True)
