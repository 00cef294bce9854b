"""Typer application and CLI entry point for bnetexport.

This module wires together the top-level Typer application: the root
callback with global output flags, the ``export`` command that runs the
whole authenticator export, and the ``config`` sub-command group.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands, and
invokes the Typer app. :class:`~bnetexport.exceptions.ExportError`
instances exit with their mapped code; any other exception is written to a
crash log under the data directory.

See Also:
    :mod:`bnetexport.export`: The flow behind the ``export`` command.
    :mod:`bnetexport.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from bnetexport import __version__
from bnetexport.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="bnet-export",
    help="Export a Battle.net Authenticator as an otpauth:// URI.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"bnet-export {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Disable interactive prompts."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~bnetexport.output.OutputManager` from
    CLI flags (falling back to ``output.format`` in the config file) and
    stores shared options in ``ctx.obj``.
    """
    from bnetexport.config import load_global_config
    from bnetexport.exceptions import ConfigError
    from bnetexport.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        # A broken config file is reported by the command that reads it;
        # ``config reset`` must stay reachable.
        try:
            fmt = OutputFormat(load_global_config().output.format)
        except ConfigError:
            fmt = OutputFormat.AUTO

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)

    ctx.ensure_object(dict)
    ctx.obj["no_input"] = no_input
    ctx.obj["verbose"] = verbose


def _prompt_missing(value: Optional[str], label: str, hide_input: bool, no_input: bool) -> str:
    """Return *value*, prompting for it when missing and prompts are allowed.

    With ``--no-input`` a missing value comes back empty so that input
    validation reports it.
    """
    if value:
        return value
    if no_input:
        return ""
    return typer.prompt(label, hide_input=hide_input, default="", show_default=False)


@app.command("export")
def export_command(
    ctx: typer.Context,
    session_token: Optional[str] = typer.Option(
        None,
        "--session-token",
        "-t",
        envvar="BNET_EXPORT_SESSION_TOKEN",
        show_envvar=True,
        help="Battle.net web session token (ST=...).",
    ),
    session_token_file: Optional[str] = typer.Option(
        None,
        "--session-token-file",
        help="Read the session token from this file.",
    ),
    serial: Optional[str] = typer.Option(
        None,
        "--serial",
        "-s",
        envvar="BNET_EXPORT_SERIAL",
        show_envvar=True,
        help="Authenticator serial, e.g. US-1234-5678-9012.",
    ),
    restore_code: Optional[str] = typer.Option(
        None,
        "--restore-code",
        "-r",
        envvar="BNET_EXPORT_RESTORE_CODE",
        show_envvar=True,
        help="Authenticator restore code.",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
) -> None:
    """Restore the authenticator and print its otpauth URI.

    Missing values are prompted for; the session token and restore code
    are read without echo. Nothing is printed to stdout unless the whole
    export succeeds.

    Example::

        bnet-export export --serial US-1234-5678-9012
        bnet-export --json export -t "$ST" -s US-1234-5678-9012 -r ABCDEFGHIJ
    """
    from bnetexport.config import read_secret_file, resolve_config
    from bnetexport.exceptions import ExportError, format_error_chain
    from bnetexport.export import export_authenticator
    from bnetexport.output import error, print_result, success

    no_input = bool(ctx.obj.get("no_input", False)) if ctx.obj else False

    try:
        config = resolve_config(cli_timeout=timeout)
        if session_token_file and not session_token:
            session_token = read_secret_file(session_token_file)

        session_token = _prompt_missing(
            session_token, "Session Token (ST=...)", hide_input=True, no_input=no_input
        )
        serial = _prompt_missing(
            serial, "Authenticator Serial", hide_input=False, no_input=no_input
        )
        restore_code = _prompt_missing(
            restore_code, "Restore Code", hide_input=True, no_input=no_input
        )

        result = export_authenticator(session_token, serial, restore_code, config=config)
    except ExportError as exc:
        error(format_error_chain(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success("Battle.net export succeeded")
    print_result(result)


from bnetexport.commands.config import config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from bnetexport.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``bnet-export`` console script.

    Unhandled :class:`~bnetexport.exceptions.ExportError` instances (for
    example an invalid config file) cause a clean exit with the error's
    ``exit_code``. All other exceptions produce a crash log and a generic
    failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from bnetexport.exceptions import ExportError, format_error_chain
        from bnetexport.output import error

        if isinstance(exc, ExportError):
            error(format_error_chain(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
