import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .loader import load_document
from .pipeline import AtomicWriter, CodeGeneratorConfig, PipelineGenerator, ValidationLibrary
from .pipeline.errors import GeneratedCodeError, TypeModelError
from .pipeline.generator import OUTPUT_FORMATS

logger = logging.getLogger(__name__)


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="JSON configuration file")
@click.option("--merge-patch", is_flag=True, default=False, help="Wrap optional properties in JsonNullable (JSON Merge Patch)")
@click.option(
    "--validation-library",
    "-v",
    default=None,
    type=click.Choice([library.value for library in ValidationLibrary]),
    help="Validation annotations to emit",
)
@click.option("--package", "-p", "package_name", default=None, type=str, help="Kotlin package of the generated models")
@click.option("--format", "-f", "output_format", default="kotlin", type=click.Choice(list(OUTPUT_FORMATS)))
@click.option("--workers", "-w", default=None, type=click.IntRange(min=1), help="Worker threads resolving schemas")
@click.option("--verbose", is_flag=True, default=False, help="Log pipeline progress")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def openapi_to_code(config, merge_patch, validation_library, package_name, output_format, workers, verbose, path, output):
    """Generate Kotlin models (or a type model dump) from an OpenAPI document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if config is not None:
        try:
            with open(config) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            config = CodeGeneratorConfig.from_dict(data)
        except ValueError as e:
            raise click.ClickException(f"Invalid configuration file {config}: {e}") from e
    else:
        config = CodeGeneratorConfig()

    # CLI flags override the config file
    if merge_patch:
        config.merge_patch = True
    if validation_library is not None:
        config.validation_library = ValidationLibrary(validation_library)
    if package_name is not None:
        config.package_name = package_name
    if workers is not None:
        config.max_workers = workers

    try:
        document = load_document(Path(path))
        codegen = PipelineGenerator(document, config)
        out = codegen.generate(output_format, generation_comment=f"Generated by {reconstruct_command_line(openapi_to_code)}")
        AtomicWriter().write(Path(output), out, OUTPUT_FORMATS[output_format])
    except (TypeModelError, GeneratedCodeError) as e:
        raise click.ClickException(str(e)) from e

    logger.info("Wrote %s", output)
