"""Allow ``python -m sendgrid_cli``."""

from sendgrid_cli.cli import main

main(prog_name="sendgrid-cli")
