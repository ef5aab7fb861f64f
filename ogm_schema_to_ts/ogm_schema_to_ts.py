import logging
from pathlib import Path

import click

from .errors import GenerationError
from .pipeline import GeneratorConfig, OutputMode, PipelineGenerator, load_config

logger = logging.getLogger("ogm_schema_to_ts")


class _ClickEchoHandler(logging.Handler):
    """Log handler writing through click, so output follows the active stderr stream."""

    def emit(self, record: logging.LogRecord) -> None:
        click.echo(self.format(record), err=True)


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger.setLevel(level)
    if not any(isinstance(h, _ClickEchoHandler) for h in logger.handlers):
        handler = _ClickEchoHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)


def _default_out_dir(source: str) -> Path:
    path = Path(source)
    return path.resolve().parent if path.is_file() else Path.cwd()


@click.command()
@click.option("--resources", "-r", is_flag=True, default=False, help="Also generate resources.ts and options.ts")
@click.option("--out", "-o", "out_dir", default=None, type=click.Path(file_okay=False, resolve_path=True), help="Output directory")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--strict", is_flag=True, default=False, help="Fail on invalid resource metadata instead of omitting the resource")
@click.option("--force/--no-force", default=True, help="Overwrite existing output files")
@click.option("--options-json", is_flag=True, default=False, help="Also write the resource options table as options.json")
@click.option("--verbose", "-v", count=True)
@click.option("--quiet", "-q", is_flag=True, default=False)
@click.argument("source", type=str)
def ogm_schema_to_ts(resources, out_dir, config, strict, force, options_json, verbose, quiet, source):
    """Generate TypeScript declarations from the OGM schema at SOURCE (file, URL or inline JSON)."""
    _configure_logging(verbose, quiet)

    try:
        config = load_config(config) if config is not None else GeneratorConfig()

        # CLI flags override the config file when set
        if strict:
            config.strict_resources = True
        if not force:
            config.output.mode = OutputMode.ERROR_IF_EXISTS

        generator = PipelineGenerator(source, config)

        if not resources:
            click.echo(generator.generate_nodes(), nl=False)
            return

        out = Path(out_dir) if out_dir is not None else _default_out_dir(source)
        result = generator.generate_resources(options_json=options_json)
        written = generator.write(result, out)
        click.echo(f"Generated {', '.join(p.name for p in written)} in {out}", err=True)

    except (GenerationError, FileExistsError) as e:
        logger.debug("Generation failed", exc_info=True)
        raise click.ClickException(str(e)) from e
