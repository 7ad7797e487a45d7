from pathlib import Path
from typing import Annotated

import typer

app = typer.Typer(add_completion=False)

_RulesOption = Annotated[
    Path | None,
    typer.Option(
        exists=True,
        help="Rules YAML file or directory (default: configured or bundled rules).",
    ),
]


@app.command()
def version() -> None:
    """Print version."""
    from quick_capture import __version__

    typer.echo(__version__)


@app.command()
def analyze(
    text: Annotated[str, typer.Argument(help="Captured line, e.g. '#work +Health walk the dog'.")],
    *,
    rules: _RulesOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the analysis as JSON.")] = False,
) -> None:
    """Parse a captured line and suggest task or note."""
    from quick_capture.entrypoints.analyze import run_analyze

    run_analyze(text=text, rules=rules, as_json=as_json)


@app.command()
def rules_list(*, rules: _RulesOption = None) -> None:
    """List suggestion rules in priority order."""
    from quick_capture.entrypoints.rules import run_rules_list

    run_rules_list(rules=rules)


@app.command()
def rules_stats(*, rules: _RulesOption = None) -> None:
    """Show statistics about the loaded rules."""
    from quick_capture.entrypoints.rules import run_rules_stats

    run_rules_stats(rules=rules)


@app.command()
def rules_test(
    text: Annotated[str, typer.Argument(help="Sample text to run through the rules.")],
    *,
    rule_id: Annotated[str | None, typer.Option(help="Report whether this rule matched.")] = None,
    rules: _RulesOption = None,
) -> None:
    """Run sample text through the analyze pipeline and report matching rules."""
    from quick_capture.entrypoints.rules import run_rules_test

    run_rules_test(text=text, rule_id=rule_id, rules=rules)


@app.command()
def serve(
    *,
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(min=1, max=65535, help="Port to listen on.")] = 8765,
    rules: _RulesOption = None,
) -> None:
    """Serve the analyze and rule administration HTTP API."""
    from quick_capture.entrypoints.capture_web import run_capture_server

    run_capture_server(host=host, port=port, rules=rules)


def main() -> None:
    app()
