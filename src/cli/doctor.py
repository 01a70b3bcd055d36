"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    """Any HTTP answer (even 401/404) proves the API is reachable."""

    try:
        async with build_async_client(settings) as client:
            response = await client.get("/")
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, f"{type(exc).__name__}: {exc}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="QLDT Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API base_url", "OK", settings.api_base_url)
    if settings.api_token:
        table.add_row("API token", "OK", "Bearer token configured")
    else:
        table.add_row("API token", "OPTIONAL", "No token set -> only public endpoints will work")
    if settings.ai_api_key:
        table.add_row("AI key", "OK", "AI scheduling enabled")
    else:
        table.add_row("AI key", "OPTIONAL", "No key set -> `qldt schedule` is disabled")
    table.add_row("AI base_url", "OK", settings.ai_base_url)
    table.add_row("AI model", "OK", settings.ai_model)
    table.add_row("User config", "OK", str(get_user_env_file()))

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("API connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] Set QLDT_API_BASE_URL (or run the backend locally) and retry."
        )


@app.command(name="setup-ai")
def setup_ai() -> None:
    """Interactive AI setup (stores config in the user config .env)."""

    provider = typer.prompt(
        "AI provider",
        default="openai",
        show_default=True,
    ).strip().lower()

    presets: dict[str, dict[str, str]] = {
        "openai": {"QLDT_AI_BASE_URL": "https://api.openai.com/v1", "QLDT_AI_MODEL": "gpt-4o-mini"},
        "deepseek": {"QLDT_AI_BASE_URL": "https://api.deepseek.com", "QLDT_AI_MODEL": "deepseek-chat"},
        "groq": {"QLDT_AI_BASE_URL": "https://api.groq.com/openai/v1", "QLDT_AI_MODEL": "llama-3.1-70b-versatile"},
        "openrouter": {"QLDT_AI_BASE_URL": "https://openrouter.ai/api/v1", "QLDT_AI_MODEL": "openai/gpt-4o-mini"},
        "ollama": {"QLDT_AI_BASE_URL": "http://localhost:11434/v1", "QLDT_AI_MODEL": "llama3"},
    }

    values = presets.get(provider, {}).copy()
    if not values:
        _console.print("[yellow]Unknown provider preset. You can still enter custom values.[/yellow]")

    base_url = typer.prompt("AI base URL", default=values.get("QLDT_AI_BASE_URL", ""), show_default=True).strip()
    model = typer.prompt("AI model", default=values.get("QLDT_AI_MODEL", ""), show_default=True).strip()
    api_key = typer.prompt("AI API key", hide_input=True, confirmation_prompt=False).strip()

    if not base_url or not model:
        raise typer.BadParameter("base_url and model are required")

    env_path = write_user_env_vars(
        {
            "QLDT_AI_BASE_URL": base_url,
            "QLDT_AI_MODEL": model,
            "QLDT_AI_API_KEY": api_key,
        }
    )

    _console.print(f"[green]Saved AI config to:[/green] {env_path}")


@app.command(name="setup-api")
def setup_api() -> None:
    """Store the API base URL (and optional token) in the user config .env."""

    settings = AppSettings()
    base_url = typer.prompt("API base URL", default=settings.api_base_url, show_default=True).strip()
    token = typer.prompt("API token (empty to skip)", default="", hide_input=True, show_default=False).strip()

    values = {"QLDT_API_BASE_URL": base_url}
    if token:
        values["QLDT_API_TOKEN"] = token
    env_path = write_user_env_vars(values)

    _console.print(f"[green]Saved API config to:[/green] {env_path}")
