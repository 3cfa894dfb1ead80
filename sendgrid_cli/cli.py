"""Command-line entry point: ``sendgrid-cli [flags] [HTML content] [plain-text content]``.

Flags are declared with click.  The optional YAML config file is loaded by an
eager ``--config`` callback and feeds the defaults of every other flag.  All
errors raised further down are caught once in :func:`main` and turned into a
log line and an exit code.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional, Sequence

import click
from click.core import ParameterSource

from sendgrid_cli import __version__
from sendgrid_cli.config import Settings, find_config_file, load_config_file
from sendgrid_cli.content import resolve_bodies
from sendgrid_cli.errors import ConfigError, SendgridCliError
from sendgrid_cli.mailer import SendResult, select_sender
from sendgrid_cli.message import build_message

LOGGER = logging.getLogger(__name__)

DEFAULT_FROM = "sendgrid-cli@nowitworks.eu"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
SECRET_PARAMS = frozenset({"key", "password"})
CONFIG_PATH_META = "sendgrid_cli.config_path"

HELP = """SendGrid CLI application that provides email distribution with attachments,
templates, and template parameter substitution.

The content of the email can be specified either using positional parameters
or the --html / --plain options, e.g.

\b
    sendgrid-cli -k API-KEY -t recipient@domain.net -f sender@foo.bar \\
        -s "The subject" "Dear recipient, <br/><p>..."

in this case the HTML content gets converted into the plain-text version and
added to the message.

\b
    sendgrid-cli -k API-KEY -t recipient@domain.net -f sender@foo.bar \\
        -s "The subject" -b FILENAME.html
    sendgrid-cli -k API-KEY -t recipient@domain.net -f sender@foo.bar \\
        -s "The subject" -T TEMPLATE-ID -S "name=John Doe" -S "price=$42"

Instead of -k API-KEY you can use --user/-U with --password/-P.
"""


def _load_config(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> None:
    try:
        config_path = find_config_file(value)
        defaults = load_config_file(config_path) if config_path else {}
    except ConfigError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc
    ctx.default_map = {**defaults, **(ctx.default_map or {})}
    ctx.meta[CONFIG_PATH_META] = config_path


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )


def _log_options(ctx: click.Context) -> None:
    title = f"Command {ctx.info_name!r} called with flags:"
    LOGGER.info(title)
    LOGGER.info("=" * len(title))
    for name, value in ctx.params.items():
        if name in SECRET_PARAMS and value:
            value = "********"
        LOGGER.debug("%s = %r", name, value)


def send_message(
    settings: Settings,
    *,
    bodies: Sequence[str],
    sender: str,
    to: Sequence[str],
    subject: str,
    cc: Sequence[str] = (),
    html_file: Optional[str] = None,
    plain_file: Optional[str] = None,
    attachments: Sequence[str] = (),
    template_id: Optional[str] = None,
    substitutions: Sequence[str] = (),
) -> SendResult:
    """Validate the input, build the message and deliver it once."""
    html, plain = resolve_bodies(bodies, html_file, plain_file, template_id)
    mailer = select_sender(settings)
    message = build_message(
        sender=sender,
        to=to,
        subject=subject,
        html=html,
        plain=plain,
        cc=cc,
        attachments=attachments,
        template_id=template_id,
        substitutions=substitutions,
    )
    return mailer.send(message)


@click.command(
    name="sendgrid-cli",
    help=HELP,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    callback=_load_config,
    is_eager=True,
    expose_value=False,
    help="Config file (default is $HOME/.sendgrid-cli.yaml).",
)
@click.option("-d", "--debug", is_flag=True, help="Show full details of the request and flags.")
@click.option("-V", "--verbose", is_flag=True, help="Show more verbose details.")
@click.option("-j", "--json", "json_output", is_flag=True, help="Print the result as JSON.")
@click.option(
    "-k", "--key", help="SendGrid API key (can be set using environment variable SENDGRID_API_KEY)."
)
@click.option("-U", "--user", envvar="SENDGRID_USER", help="SendGrid user name.")
@click.option("-P", "--password", envvar="SENDGRID_PASSWORD", help="SendGrid user password.")
@click.option(
    "-f",
    "--from",
    "sender",
    envvar="SENDGRID_FROM",
    default=DEFAULT_FROM,
    show_default=True,
    help="FROM address.",
)
@click.option("-t", "--to", multiple=True, help="TO address (can be multiple).")
@click.option("--cc", multiple=True, help="CC address (can be multiple).")
@click.option("-a", "--att", multiple=True, help="Attachment (can be multiple).")
@click.option("-s", "--subject", default="", help="Email subject.")
@click.option("-b", "--html", help="HTML body file name.")
@click.option("-p", "--plain", help="Plain-text body file name.")
@click.option("-T", "--template-id", help="SendGrid template ID.")
@click.option(
    "-S",
    "--sub",
    multiple=True,
    help="Template parameter substitution, e.g. --sub 'name=John Doe' (can be multiple).",
)
@click.version_option(__version__, prog_name="sendgrid-cli")
@click.argument("bodies", nargs=-1)
@click.pass_context
def main(
    ctx: click.Context,
    debug: bool,
    verbose: bool,
    json_output: bool,
    key: Optional[str],
    user: Optional[str],
    password: Optional[str],
    sender: str,
    to: Sequence[str],
    cc: Sequence[str],
    att: Sequence[str],
    subject: str,
    html: Optional[str],
    plain: Optional[str],
    template_id: Optional[str],
    sub: Sequence[str],
    bodies: Sequence[str],
) -> None:
    _setup_logging(debug)
    config_path = ctx.meta.get(CONFIG_PATH_META)
    if config_path:
        LOGGER.info("Using config file: %s", config_path)
    if debug:
        _log_options(ctx)

    # The config file sits below the environment; --key itself has no envvar.
    if ctx.get_parameter_source("key") == ParameterSource.DEFAULT_MAP:
        key = os.environ.get("SENDGRID_API_KEY") or key

    settings = Settings.from_options(
        api_key=key,
        username=user,
        password=password,
        debug=debug,
        verbose=verbose,
        json_output=json_output,
    )
    try:
        result = send_message(
            settings,
            bodies=bodies,
            sender=sender,
            to=to,
            subject=subject,
            cc=cc,
            html_file=html,
            plain_file=plain,
            attachments=att,
            template_id=template_id,
            substitutions=sub,
        )
    except SendgridCliError as exc:
        LOGGER.error("%s", exc)
        ctx.exit(exc.exit_code)

    if settings.json_output:
        click.echo(json.dumps(result.as_dict(), indent=2))


if __name__ == "__main__":
    main(prog_name="sendgrid-cli")
