"""CLI entrypoints for rendering document shells."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from markupsafe import Markup
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from .config import CONFIG_FILENAME, ConfigError, ShellConfig, load_config
from .document import DocumentShellError, HtmlDocument
from .options import DocumentOptions

logger = logging.getLogger(__name__)

console = Console(stderr=True)
app = typer.Typer(help="Render the outer HTML document of server-rendered pages.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file or project directory."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """docshell command line."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@app.command()
def render(  # noqa: PLR0913
    config_path: ConfigPathOption = ".",
    title: Annotated[str | None, typer.Option("--title", "-t", help="Document title.")] = None,
    description: Annotated[
        str | None,
        typer.Option("--description", help="Meta description."),
    ] = None,
    canonical: Annotated[str | None, typer.Option("--canonical", help="Canonical URL.")] = None,
    vwo: Annotated[
        bool | None,
        typer.Option("--vwo/--no-vwo", help="Toggle the Visual Website Optimizer snippet."),
    ] = None,
    vwo_account_id: Annotated[
        int | None,
        typer.Option("--vwo-account-id", min=1, help="Custom Visual Website Optimizer account id."),
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", "-e", help="KEY=VALUE pair exposed as window.process.env (repeatable)."),
    ] = None,
    body: Annotated[
        Path | None,
        typer.Option("--body", exists=True, dir_okay=False, help="HTML fragment rendered into <body>."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the document here instead of the configured output."),
    ] = None,
) -> None:
    """Render a document shell to a file or stdout."""
    config = _load(config_path)
    overrides: dict[str, Any] = {}
    if title is not None:
        overrides["title"] = title
    if description is not None:
        overrides["description"] = description
    if canonical is not None:
        overrides["canonical"] = canonical
    if vwo_account_id is not None and vwo is not False:
        overrides["visual_website_optimizer"] = {"account_id": vwo_account_id}
    elif vwo is not None:
        overrides["visual_website_optimizer"] = vwo

    options = config.document_options()
    if env:
        overrides["env"] = {**options.env, **_parse_env_pairs(env)}
    options = _apply_overrides(options, overrides)
    logger.debug("Rendering document with options: %s", options)

    children = []
    if body is not None:
        children.append(Markup(body.read_text(encoding="utf-8")))

    try:
        html = HtmlDocument(options).render(*children)
    except (DocumentShellError, TypeError, ValueError) as exc:
        console.print(f"[bold red]Render failed[/]: {exc}")
        raise typer.Exit(code=1) from exc

    destination = output or config.output
    if destination is None:
        typer.echo(html, nl=False)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(html, encoding="utf-8")
    console.print(f"[bold green]Rendered[/] {destination}")


@app.command("options")
def show_options(config_path: ConfigPathOption = ".") -> None:
    """Print the resolved document options as JSON."""
    config = _load(config_path)
    resolved = config.document_options()
    payload = resolved.model_dump(mode="json", exclude_none=True)
    payload["optimizer"] = type(resolved.optimizer).__name__
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def _parse_env_pairs(pairs: list[str]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{pair}'.", param_hint="--env")
        parsed[key.strip()] = value
    return parsed


def _apply_overrides(options: DocumentOptions, overrides: dict[str, Any]) -> DocumentOptions:
    try:
        return options.merged(**overrides)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load(path: str) -> ShellConfig:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path} (expected {CONFIG_FILENAME})") from exc
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    app()
