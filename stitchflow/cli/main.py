"""stitchflow CLI — Typer application."""

import typer
from rich.console import Console

from stitchflow.version import __version__

app = typer.Typer(
    name="stitchflow",
    help="stitchflow — turn prompts into HTML previews via the Stitch design service.",
    no_args_is_help=True,
)
console = Console()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", is_eager=True, help="Show version"),
):
    """stitchflow CLI."""
    if version:
        console.print(f"stitchflow v{__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


from stitchflow.cli.commands import config, generate, serve  # noqa: E402

app.command(name="serve", help="Run the HTTP API")(serve.serve)
app.command(name="generate", help="Run one design flow and print the HTML")(generate.generate)
app.command(name="config", help="Show resolved configuration")(config.config_show)


if __name__ == "__main__":
    app()
