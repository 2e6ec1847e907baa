"""``tablit`` command line tool"""
from __future__ import annotations

import json
import logging
from typing import BinaryIO, TextIO

import click

from tablit import pack, ranges

logger = logging.getLogger(__name__)

FORMATS = click.Choice(["json", "msgpack"])


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG)
    logging.getLogger("tablit").setLevel(logging.DEBUG)


def _parse_item(item: str) -> int | str:
    try:
        return int(item)
    except ValueError:
        return item


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
def cli(verbose: bool) -> None:
    """Convert documents to and from compact table literals."""
    _configure_logging(verbose)


@cli.command()
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "--from",
    "fmt",
    type=FORMATS,
    default="json",
    show_default=True,
    help="Format of the input document.",
)
def encode(source: BinaryIO, fmt: str) -> None:
    """Print the table literal of a json or msgpack document"""
    data = source.read()
    try:
        if fmt == "json":
            value = json.loads(data)
        else:
            value = pack.load_bin(data)
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Cannot read {fmt} input: {e}")
    logger.debug("Read %d bytes of %s", len(data), fmt)
    click.echo(pack.dump_text(value))


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--to",
    "fmt",
    type=FORMATS,
    default="json",
    show_default=True,
    help="Format of the output document.",
)
@click.option("--indent", type=int, default=None, help="Indent json output.")
@click.option(
    "-o", "--output", type=click.File("wb"), default="-", help="Output file."
)
def decode(
    source: TextIO, fmt: str, indent: int | None, output: BinaryIO
) -> None:
    """Convert a table literal to json or msgpack"""
    try:
        value = pack.parse_text(source.read())
    except pack.DecodeError as e:
        raise click.ClickException(str(e))
    try:
        if fmt == "json":
            plain = pack.to_plain(value, string_keys=True)
            payload = (json.dumps(plain, indent=indent) + "\n").encode()
        else:
            payload = pack.dump_bin(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise click.ClickException(f"Cannot write {fmt} output: {e}")
    output.write(payload)


@cli.command("ranges")
@click.argument("items", nargs=-1)
def ranges_(items: tuple[str, ...]) -> None:
    """Print a compact list of numbers (e.g.: ``1~3,5``)"""
    click.echo(ranges.compress(_parse_item(item) for item in items))


if __name__ == "__main__":
    cli()
