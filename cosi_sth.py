"""
cosi-sth - check that a CT log's signed tree head is co-signed by a witness group.

Usage:
    cosi-sth [--log-uri URI] [--config FILE] [-v]
    cosi-sth --dump [--log-uri URI] [--dump-dir DIR]

Exit codes:
    0 - signature verified, signature rejected, or dump written
    1 - the audit could not be carried out (config, network or decoding error)
"""

import sys

import click

from CT_interface import DEFAULT_LOG_URI, DEFAULT_TIMEOUT
from auditor import Auditor, Verdict
from configuration import CONFIGURATION_FILE, TrustConfig
from errors import AuditError
from logging_config import configure_logging

EXIT_OK = 0
EXIT_ERROR = 1


def report(outcome) -> int:
    if outcome.verdict is Verdict.VERIFIED:
        click.echo(f"Successfully received STH with hash {outcome.root_hash.hex()}")
        click.echo("and checked cosi signature to be OK")
        return EXIT_OK
    if outcome.verdict is Verdict.REJECTED:
        click.echo(f"STH with hash {outcome.root_hash.hex()} didn't verify cosi signature.")
        click.echo("Perhaps wrong trust configuration?")
        return EXIT_OK
    click.echo(f"Audit of {outcome.log_uri} failed at {outcome.failed_step}: {outcome.reason}", err=True)
    return EXIT_ERROR


@click.command(name="cosi-sth")
@click.option("--log-uri", default=DEFAULT_LOG_URI, show_default=True, help="CT log base URI")
@click.option("--dump/--no-dump", default=False, help="Dump the STH signature and hash instead of verifying")
@click.option("--config", "config_path", default=CONFIGURATION_FILE, show_default=True,
              envvar="COSI_STH_CONFIG", help="Trust configuration (suite and aggregate public key)")
@click.option("--dump-dir", default=".", show_default=True, type=click.Path(file_okay=False),
              help="Directory the dump files are written to")
@click.option("--timeout", default=DEFAULT_TIMEOUT, show_default=True, type=click.FloatRange(min=0, min_open=True),
              help="Seconds to wait for the CT log")
@click.option("-v", "--verbose", count=True, help="Log more; repeat for debug output")
def main(log_uri, dump, config_path, dump_dir, timeout, verbose):
    configure_logging(verbose)
    auditor = Auditor(trust_loader=lambda: TrustConfig.load(config_path), timeout=timeout)

    if dump:
        try:
            result = auditor.dump(log_uri, dump_dir)
        except AuditError as e:
            click.echo(f"Couldn't dump STH of {log_uri}: {e}", err=True)
            sys.exit(EXIT_ERROR)
        click.echo(f"Dumped cosi signature to {result.cosi_path}")
        click.echo(f"Dumped root hash to {result.sha256_path}")
        sys.exit(EXIT_OK)

    sys.exit(report(auditor.verify(log_uri)))


if __name__ == "__main__":
    main()
