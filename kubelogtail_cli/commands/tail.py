from __future__ import annotations

import signal
import threading
from typing import Optional

import typer
from rich.markup import escape

from kubelogtail.color import ColorAssigner
from kubelogtail.config import build_config, get_profile
from kubelogtail.errors import KubeLogTailError
from kubelogtail.logging import get_console, get_err_console, set_verbose
from kubelogtail.reconciler import Reconciler
from kubelogtail_kubernetes import KubernetesClusterClient

app = typer.Typer(help="Tail logs from every pod matching a selector")

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _install_signal_handlers(reconciler: Reconciler) -> dict:
    previous = {}

    def handle_signal(signum, frame) -> None:
        # The main thread may be holding a scope or event lock right now.
        threading.Thread(target=reconciler.stop, name="stop-on-signal", daemon=True).start()

    for sig in STOP_SIGNALS:
        previous[sig] = signal.signal(sig, handle_signal)
    return previous


def _restore_signal_handlers(previous: dict) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


@app.callback(invoke_without_command=True)
def main(
    kubeconfig: Optional[str] = typer.Option(None, "--kubeconfig", help="Path to kubeconfig"),
    context: Optional[str] = typer.Option(None, "--context", help="Kubeconfig context to use"),
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Namespace for pods. Use \"\" for all namespaces",
    ),
    selector: Optional[str] = typer.Option(None, "--selector", "-l", help="Label selector for pods"),
    refresh: Optional[str] = typer.Option(
        None,
        "--refresh",
        "-r",
        help="How often to refresh the list of pods, e.g. 10s",
    ),
    color: Optional[str] = typer.Option(
        None,
        "--colored-output",
        "-k",
        help="Use colored output (pod|line|off)",
    ),
    profile: Optional[str] = typer.Option(None, "--profile", help="Config profile"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    err_console = get_err_console()
    if verbose:
        set_verbose(True)

    try:
        tail_config = build_config(
            get_profile(profile),
            kubeconfig=kubeconfig,
            context=context,
            namespace=namespace,
            selector=selector,
            refresh=refresh,
            color_mode=color,
        )
        assigner = ColorAssigner(tail_config.color_mode, console=get_console())
        cluster = KubernetesClusterClient(
            kubeconfig=tail_config.kubeconfig,
            context=tail_config.context,
        )
    except KubeLogTailError as exc:
        err_console.print(f"[error]{escape(str(exc))}[/error]")
        raise typer.Exit(1)

    reconciler = Reconciler(cluster, tail_config, assigner, console=err_console)
    previous = _install_signal_handlers(reconciler)
    try:
        reconciler.run()
    finally:
        _restore_signal_handlers(previous)
