import typer

from vellum.cli import show

app = typer.Typer(
    help="Vellum resolves and inspects the filters available to your templates.",
    add_completion=False,
)


def settings_callback(ctx: typer.Context, settings: str | None = None) -> None:
    """
    Priority order (highest to lowest):
    1. --settings CLI argument
    2. VELLUM_SETTINGS environment variable (handled by VellumSettings.load)
    3. Default vellum.yaml (handled by VellumSettings.load)
    """
    ctx.obj = {"settings": settings if settings else ""}


@app.callback()
def main(
    ctx: typer.Context,
    settings: str | None = typer.Option(
        None, "--settings", "-s", help="Specify a path to a custom settings file."
    ),
) -> None:
    settings_callback(ctx, settings)


app.command()(show.show)

if __name__ == "__main__":
    app()
