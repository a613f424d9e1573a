"""stitchflow generate — Run one design flow from the command line."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)

_SOURCE_STYLE = {
    "System": "cyan",
    "Stitch": "magenta",
    "Codegen": "blue",
    "Error": "bold red",
}


async def _run(prompt: str, token: Optional[str], interaction_id: Optional[str]):
    from stitchflow.api.handler import GenerationHandler
    from stitchflow.api.schemas import CredentialOverrides
    from stitchflow.config import StitchflowConfig
    from stitchflow.mcp.client import build_invoker

    cfg = StitchflowConfig()
    handler = GenerationHandler(cfg, build_invoker(cfg))
    overrides = CredentialOverrides(stitch_key=token) if token else None
    return await handler.handle(prompt, overrides=overrides, continuation_token=interaction_id)


def generate(
    prompt: str = typer.Argument(..., help="What to design, e.g. 'a minimal todo list'"),
    token: Optional[str] = typer.Option(None, "--token", "-t", help="Stitch token (overrides STITCH_ACCESS_TOKEN)"),
    interaction_id: Optional[str] = typer.Option(None, "--interaction-id", help="Resume from a previous run"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write HTML here instead of stdout"),
):
    """Run the design flow once and emit the HTML."""
    from stitchflow.exceptions import CredentialMissing, InvalidRequest
    from stitchflow.logging_config import configure_logging

    configure_logging("WARNING")
    try:
        result = asyncio.run(_run(prompt, token, interaction_id))
    except (CredentialMissing, InvalidRequest) as exc:
        console.print(f"[bold red]✗[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    for entry in result.log.entries:
        style = _SOURCE_STYLE.get(entry.source, "white")
        console.print(f"[{style}]{escape('[' + entry.source + ']')}[/{style}] {escape(entry.message)}", highlight=False)

    if not result.success:
        console.print(f"[bold red]✗ Flow failed:[/bold red] {escape(result.error or '')}")
        raise typer.Exit(code=1)

    if out:
        out.write_text(result.code, encoding="utf-8")
        console.print(f"[green]✓[/green] HTML written to {out}")
    else:
        typer.echo(result.code)
    if result.continuation_token:
        console.print(f"[dim]interaction id: {result.continuation_token}[/dim]")
