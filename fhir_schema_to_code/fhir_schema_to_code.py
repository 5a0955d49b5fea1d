import json
import logging

import click

from .cli_utils import configure_logging, reconstruct_command_line
from .pipeline import CompilerConfig, PipelineGenerator, SchemaCompileError, SchemaKind, Severity

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", count=True, help="Log progress (-v) or every step (-vv)")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only log errors")
def fhir_schema_to_code(verbose, quiet):
    """Generate Python dataclass modules from FHIR structure definition bundles."""
    configure_logging(verbose, quiet)


def generation_options(command):
    """Options and arguments shared by every generation command."""
    command = click.argument("output_dir", type=click.Path(file_okay=False, resolve_path=True))(command)
    command = click.argument(
        "bundles",
        nargs=-1,
        required=True,
        type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    )(command)
    command = click.option(
        "--strict-roots",
        is_flag=True,
        default=False,
        help="Fail instead of warning when the hierarchy has more roots than allowed",
    )(command)
    command = click.option("--workers", "-w", default=None, type=click.IntRange(min=1), help="Worker threads")(command)
    command = click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))(command)
    return command


def load_config(config, workers, strict_roots) -> CompilerConfig:
    if config is not None:
        with open(config) as f:
            config = CompilerConfig.from_dict(json.load(f))
    else:
        config = CompilerConfig()

    # CLI flags override the config file
    if workers is not None:
        config.workers = workers
    if strict_roots:
        config.multiple_roots_severity = Severity.ERROR
    return config


def run(kind: SchemaKind, config, workers, strict_roots, bundles, output_dir) -> None:
    config = load_config(config, workers, strict_roots)
    command_line = reconstruct_command_line(click.get_current_context().command)

    try:
        codegen = PipelineGenerator.from_files(list(bundles), config)
        descriptors = codegen.generate(kind, output_dir, command_line)
    except SchemaCompileError as e:
        raise click.ClickException(str(e)) from e

    for descriptor in descriptors:
        logger.info("%s -> %s", descriptor.source_id, descriptor.normalized_identifier)
    click.echo(f"Generated {len(descriptors)} {kind.value} modules in {output_dir}")


@fhir_schema_to_code.command("primitive-types")
@generation_options
def primitive_types(config, workers, strict_roots, bundles, output_dir):
    """Generate the primitive type modules of BUNDLES into OUTPUT_DIR."""
    run(SchemaKind.PRIMITIVE_TYPE, config, workers, strict_roots, bundles, output_dir)


@fhir_schema_to_code.command("complex-types")
@generation_options
def complex_types(config, workers, strict_roots, bundles, output_dir):
    """Generate the complex type modules of BUNDLES into OUTPUT_DIR."""
    run(SchemaKind.COMPLEX_TYPE, config, workers, strict_roots, bundles, output_dir)


@fhir_schema_to_code.command("resources")
@generation_options
def resources(config, workers, strict_roots, bundles, output_dir):
    """Generate the resource modules of BUNDLES into OUTPUT_DIR."""
    run(SchemaKind.RESOURCE, config, workers, strict_roots, bundles, output_dir)
