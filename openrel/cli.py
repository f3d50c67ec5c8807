"""Command line entry point for open relation extraction.

Reads sentences (one per line unless ``--split`` is given) from files or standard
input and prints "confidence: extraction" lines, or one of the tabular formats.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from openrel.errors import ConfigurationError, InputEncodingError, SentenceProcessingError
from openrel.pipeline.extraction_pipeline import ExtractionPipeline
from openrel.pipeline.output_formats import OutputFormat
from openrel.utils.config import Config, RunSettings
from openrel.utils.logging import setup_logging

USAGE_INTRO = (
    "openrel takes sentences as input, one per line.\n"
    'The response is "confidence: extraction", one extraction per line.'
)

app = typer.Typer(
    help="Extract relational tuples from sentences.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

err_console = Console(stderr=True, color_system=None, force_terminal=False, width=120)


def _fail(message: str, code: int) -> typer.Exit:
    err_console.print(f"[bold]Error:[/bold] {escape(message)}")
    return typer.Exit(code=code)


def _confidence_model(value: Optional[str]) -> tuple[Optional[Path], bool]:
    """Return (path, disabled) for the ``--confidence-model`` value."""
    if value is None:
        return None, False
    if value.lower() == "none":
        return None, True
    return Path(value), False


def build_settings(
    config: Config,
    *,
    files: Optional[List[Path]],
    output: Optional[Path],
    encoding: Optional[str],
    model: Optional[Path],
    confidence_model: Optional[str],
    parser_model: Optional[str],
    threshold: Optional[float],
    extractor_threshold: Optional[float],
    parallel: bool,
    split: bool,
    dependencies: bool,
    output_format: Optional[str],
    ignore_errors: bool,
) -> RunSettings:
    """Merge command line flags over configuration and validate the result."""
    confidence_path, confidence_disabled = _confidence_model(confidence_model)
    settings = RunSettings.from_config(
        config,
        input_files=tuple(files) if files else None,
        output_file=output,
        encoding=encoding,
        model_path=model,
        confidence_model_path=confidence_path,
        parser_model=parser_model,
        confidence_threshold=threshold,
        extractor_threshold=extractor_threshold,
        parse_input=not dependencies,
        split_input=split,
        output_format=OutputFormat.parse(output_format) if output_format is not None else None,
        parallel=parallel,
        invincible=ignore_errors,
    )
    if confidence_disabled:
        settings = settings.model_copy(update={"confidence_model_path": None})
    settings.validate_settings()
    return settings


@app.command()
def main(
    ctx: typer.Context,
    files: Optional[List[Path]] = typer.Argument(
        None,
        help="Input text files (one sentence per line unless --split is given). Reads stdin if omitted.",
        show_default=False,
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (otherwise stdout)."),
    encoding: Optional[str] = typer.Option(
        None, "--encoding", "-e", help="Character encoding for input and output (UTF-8 by default)."
    ),
    model: Optional[Path] = typer.Option(None, "--model", "-m", help="Extraction pattern model file."),
    confidence_model: Optional[str] = typer.Option(
        None, "--confidence-model", "-c", help="Confidence model file, or 'None' to disable scoring."
    ),
    parser_model: Optional[str] = typer.Option(
        None, "--malt-model", help="Parser model (installed spaCy package name or path)."
    ),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", help="Minimum confidence for an extraction to be output."
    ),
    extractor_threshold: Optional[float] = typer.Option(
        None, "--openparse-threshold", help="Minimum pattern confidence inside the extractor."
    ),
    parallel: bool = typer.Option(False, "--parallel", "-p", help="Execute in parallel."),
    split: bool = typer.Option(False, "--split", "-s", help="Split text into sentences."),
    dependencies: bool = typer.Option(
        False, "--dependencies", help="Input is serialized dependency graphs (don't parse)."
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        help="Output format: interactive, tabbed, tabbedsingle or serialized.",
    ),
    ignore_errors: bool = typer.Option(False, "--ignore-errors", help="Skip sentences that fail."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Optional YAML configuration file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    usage: bool = typer.Option(False, "--usage", help="Show this usage message and exit."),
) -> None:
    """Extract relational tuples from sentences."""
    if split and dependencies:
        raise _fail("options 'split' and 'dependencies' are not compatible.", 2)

    if usage:
        typer.echo()
        typer.echo(USAGE_INTRO)
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        config = Config.from_yaml(config_path)
        setup_logging(config.logging, verbose=verbose)
        settings = build_settings(
            config,
            files=files,
            output=output,
            encoding=encoding,
            model=model,
            confidence_model=confidence_model,
            parser_model=parser_model,
            threshold=threshold,
            extractor_threshold=extractor_threshold,
            parallel=parallel,
            split=split,
            dependencies=dependencies,
            output_format=output_format,
            ignore_errors=ignore_errors,
        )
    except (ConfigurationError, ValidationError) as exc:
        raise _fail(str(exc), 2) from None

    pipeline = ExtractionPipeline(settings)
    try:
        pipeline.initialize_components()
    except (RuntimeError, OSError, ValueError) as exc:
        raise _fail(f"Could not load models: {exc}", 2) from None

    try:
        code = pipeline.run()
    except InputEncodingError as exc:
        logger.opt(exception=exc.cause).debug("Decode failure in {}", exc.source)
        raise _fail(f"{exc}\n{exc.help_message}", 1) from None
    except SentenceProcessingError as exc:
        logger.opt(exception=exc.cause).error("Extraction aborted: {}", exc)
        err_console.print("Use --ignore-errors to skip sentences that fail.")
        raise typer.Exit(code=1) from None
    raise typer.Exit(code=code)


def run() -> None:
    """Entrypoint for Typer."""
    app()


if __name__ == "__main__":
    run()
