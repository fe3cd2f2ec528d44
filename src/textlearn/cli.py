"""textlearn command-line interface."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from . import __version__
from .classifiers import ProbabilisticTextModel, default_registry
from .config import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, Config, ConfigError, load_config
from .corpus import load_corpus, tokenize
from .logging import configure_logging
from .store import ModelRecord, ModelStore

app = typer.Typer(help="Train and apply text classifiers.")
LOGGER = logging.getLogger(__name__)


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None


@app.callback()
def _textlearn(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help=(
                "Path to textlearn config "
                "(env TEXTLEARN_CONFIG or ~/.config/textlearn/config.yaml)."
            ),
        ),
    ] = None,
) -> None:
    """Capture global CLI options."""

    resolved = config.expanduser() if config else None
    ctx.obj = CLIState(config_path=resolved)


@app.command()
def train(
    ctx: typer.Context,
    corpus: Annotated[Path, typer.Argument(..., help="Corpus file with 'label<TAB>text' lines.")],
    model: Annotated[
        str,
        typer.Option("-m", "--model", help="Model kind to train (see 'info --kinds')."),
    ] = "naive_bayes",
    name: Annotated[
        str,
        typer.Option("-n", "--name", help="Name to store the model under."),
    ] = "default",
) -> None:
    """Train a model on a labelled corpus and store it."""

    config, store = _load_environment(_state(ctx))
    registry = default_registry()
    if model not in registry:
        typer.secho(
            f"Unknown model '{model}'. Choose one of: {', '.join(registry.names())}.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1) from None

    try:
        store.path_for(name)
        training_set = load_corpus(corpus)
        trained = registry.build(model, training_set, config)
        record = ModelRecord(
            name=name,
            kind=model,
            model=trained.model,
            classes=tuple(sorted(training_set)),
            documents=sum(len(documents) for documents in training_set.values()),
            vocabulary_size=trained.vocabulary_size,
            epochs=max((report.epochs for report in trained.reports), default=None),
            squared_error=trained.reports[-1].squared_error if trained.reports else None,
        )
        path = store.save(record)
    except ValueError as exc:
        typer.secho(f"Training failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc

    typer.echo(
        f"Trained {model} model '{name}' on {record.documents} document(s) "
        f"in {len(record.classes)} class(es)."
    )
    typer.echo(f"Saved to {path}")


@app.command()
def classify(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(..., help="Text to classify.")],
    name: Annotated[str, typer.Option("-n", "--name", help="Stored model name.")] = "default",
) -> None:
    """Classify a piece of text with a stored model."""

    _config, store = _load_environment(_state(ctx))
    record = _load_record(store, name)
    words = tokenize(text)
    if not words:
        typer.secho("Text contains no words.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    try:
        if isinstance(record.model, ProbabilisticTextModel):
            result = record.model.classify_with_probability(words)
            typer.echo(f"class: {_format_label(result.class_id)}")
            typer.echo(f"probability: {result.probability:.4f}")
            for label, probability in sorted(result.probabilities.items()):
                typer.echo(f"  {_format_label(label)}: {probability:.4f}")
        else:
            typer.echo(f"class: {_format_label(record.model.classify(words))}")
    except ValueError as exc:
        typer.secho(f"Classification failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


@app.command()
def info(
    ctx: typer.Context,
    name: Annotated[
        str | None,
        typer.Option("-n", "--name", help="Stored model name (omit to list models)."),
    ] = None,
    kinds: Annotated[
        bool,
        typer.Option("--kinds", help="List the model kinds that can be trained."),
    ] = False,
) -> None:
    """Show configuration, stored models and model details."""

    state = _state(ctx)
    config, store = _load_environment(state)
    if kinds:
        for entry in default_registry().entries():
            typer.echo(f"{entry.name}: {entry.description}")
        return

    if name is None:
        typer.echo("→ textlearn")
        typer.echo(f"Version: {__version__}")
        typer.echo(f"Config path: {_resolved_config_path(state.config_path)}")
        typer.echo(f"Root dir: {config.root_dir}")
        typer.echo("Models:")
        names = store.names()
        if not names:
            typer.echo("  (none)")
        for stored in names:
            typer.echo(f"  - {stored}")
        return

    record = _load_record(store, name)
    typer.echo(f"Model: {record.name}")
    typer.echo(f"Kind: {record.kind}")
    typer.echo(f"Classes: {', '.join(_format_label(label) for label in record.classes)}")
    typer.echo(f"Documents: {record.documents}")
    if record.vocabulary_size is not None:
        typer.echo(f"Vocabulary: {record.vocabulary_size} word(s)")
    if record.epochs is not None:
        typer.echo(f"Epochs: {record.epochs}")
    if record.squared_error is not None:
        typer.echo(f"Epoch error: {record.squared_error:.6f}")
    typer.echo(f"Created: {record.created_at.isoformat(timespec='seconds')}")


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state missing from context.")
    return state


def _load_environment(state: CLIState) -> tuple[Config, ModelStore]:
    config = _load_config(state.config_path)
    try:
        configure_logging(config.logging, config.root_dir)
    except ConfigError as exc:
        _config_failure(exc)
    return config, ModelStore(config.root_dir)


def _load_config(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        _config_failure(exc)


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


def _load_record(store: ModelStore, name: str) -> ModelRecord:
    try:
        record = store.load(name)
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    if record is None:
        typer.secho(f"No stored model named '{name}'.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    return record


def _format_label(label: float) -> str:
    return f"{label:g}"


def _resolved_config_path(path: Path | None) -> Path:
    if path:
        return path
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
