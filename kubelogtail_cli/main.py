import typer

from kubelogtail import __version__
from kubelogtail.logging import get_console
from kubelogtail_cli.commands import config, tail

app = typer.Typer(help="Tail Kubernetes pod logs")
app.add_typer(tail.app, name="tail")
app.add_typer(config.app, name="config")


@app.command("version")
def version():
    get_console().print(f"kube-log-tail version: {__version__}")


if __name__ == "__main__":
    app()
