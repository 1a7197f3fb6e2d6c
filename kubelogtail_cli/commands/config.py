from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape

from kubelogtail.config import CONFIG_PATH, build_config, get_profile, save_config
from kubelogtail.errors import ConfigError
from kubelogtail.logging import get_console

app = typer.Typer(help="Manage kube-log-tail configuration")


@app.command("init")
def init_config(force: bool = typer.Option(False, "--force", help="Overwrite an existing file")):
    console = get_console()
    if CONFIG_PATH.exists() and not force:
        console.print(f"[error]Config file already exists:[/error] {CONFIG_PATH}")
        raise typer.Exit(1)
    path = save_config(CONFIG_PATH)
    console.print(f"[success]Wrote config template to[/success] {path}")


@app.command("show")
def show_config(profile: Optional[str] = typer.Option(None, "--profile", help="Config profile")):
    console = get_console()
    try:
        profile_data = get_profile(profile)
        tail_config = build_config(profile_data)
    except ConfigError as exc:
        console.print(f"[error]{escape(str(exc))}[/error]")
        raise typer.Exit(1)
    console.print(f"[info]profile[/info] {escape(profile_data.name)}")
    console.print(f"[info]kubeconfig[/info] {escape(tail_config.kubeconfig or '(default)')}")
    console.print(f"[info]context[/info] {escape(tail_config.context or '(current)')}")
    console.print(f"[info]namespace[/info] {escape(tail_config.namespace or '(all)')}")
    console.print(f"[info]selector[/info] {escape(tail_config.selector or '(none)')}")
    console.print(f"[info]refresh[/info] {tail_config.refresh_interval:g}s")
    console.print(f"[info]color[/info] {escape(tail_config.color_mode)}")
