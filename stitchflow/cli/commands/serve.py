"""stitchflow serve — Start the API server."""

from typing import Optional

import typer
from rich.console import Console

console = Console()


def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind to (default: STITCH_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to listen on (default: STITCH_PORT)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Start the stitchflow API server."""
    import uvicorn
    from stitchflow.config import StitchflowConfig

    cfg = StitchflowConfig()
    host = host or cfg.host
    port = port or cfg.port
    console.print(f"[green]stitchflow listening on http://{host}:{port}[/green]")
    uvicorn.run("stitchflow.api.main:app", host=host, port=port, reload=reload, log_level=cfg.log_level.lower())
