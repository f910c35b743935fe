"""CLI entrypoint: Typer app definition and command registration"""

import typer

from postpub.cli.commands import (
    aliases_cmd, check_cmd, commit_cmd, export_cmd, init_cmd, show_cmd, terms_cmd,
)


app = typer.Typer(name="postpub", no_args_is_help=True, help="Blog post metadata validation and publishing")

app.command(name="check")(check_cmd)
app.command(name="show")(show_cmd)
app.command(name="init")(init_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="export")(export_cmd)
app.command(name="terms")(terms_cmd)
app.command(name="aliases")(aliases_cmd)
