"""stitchflow config — Show resolved configuration."""

from rich import box
from rich.console import Console
from rich.table import Table

console = Console()

_SENSITIVE = {"access_token", "codegen_api_key"}

_SECTIONS = [
    ("App", ["debug", "log_level"]),
    ("Stitch MCP", ["access_token", "project_id", "mcp_url", "auth_scheme", "transport", "request_timeout"]),
    ("Generation", ["device_type", "model_id", "project_title_prefix", "code_source"]),
    ("Code generation", ["codegen_model", "codegen_api_key", "codegen_max_tokens", "codegen_temperature"]),
    ("Server", ["host", "port", "cors_origins"]),
]


def config_show():
    """Show the resolved configuration. Secrets are masked.

    Example:
        stitchflow config
    """
    from stitchflow.config import StitchflowConfig
    from stitchflow.logging_config import mask_secret

    cfg = StitchflowConfig()

    table = Table(box=box.ROUNDED, header_style="bold dim", title="[bold]stitchflow configuration[/bold]")
    table.add_column("Key", style="cyan", width=24)
    table.add_column("Value", width=50)
    table.add_column("Env Var", style="dim", width=32)

    for section_name, fields in _SECTIONS:
        table.add_row(f"[bold dim]── {section_name} ──[/bold dim]", "", "")
        for attr in fields:
            val = getattr(cfg, attr, None)
            if attr in _SENSITIVE:
                display = mask_secret(val)
            elif val is None:
                display = "[dim](not set)[/dim]"
            else:
                display = str(val)
            table.add_row(f"  {attr}", display, f"STITCH_{attr.upper()}")

    console.print(table)
    console.print("[dim]Source: environment variables + .env file (prefix: STITCH_)[/dim]")
