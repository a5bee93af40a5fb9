import json
import logging
import os
from collections import Counter
from logging import Logger

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cctup.txstream.encoding import encode_tx_records
from cctup.txstream.export import build_replay_document, tx_records_to_json
from cctup.txstream.types import TransactionKind, TxRecords
from cctup.txstream.utils import HexEnabledJsonEncoder

root_logger = logging.getLogger("cctup")
logger = root_logger.getChild("txstream").getChild("cli")


def cli_logger_config(instrument_logger: Logger, verbose: bool = False) -> Console:
    """Routes package logs through a RichHandler on stderr"""
    rich_console = Console(stderr=True)
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


# -------------------------------------------------------
#    CLI Connections and Configurations
# -------------------------------------------------------
json_rpc_option = click.option(
    "--json-rpc",
    "-rpc",
    "json_rpc",
    default=os.environ.get("JSON_RPC"),
    help="RPC url to fetch blocks from.  If not provided, will use the JSON_RPC environment variable",
)
no_traces_option = click.option(
    "--no-traces",
    is_flag=True,
    default=False,
    help="Skip debug_traceBlockByNumber.  Use for nodes without the debug namespace; internal calls will be "
    "empty, so contract calls are classified from calldata alone",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log per-transaction diagnostics",
)

# -------------------------------------------------------
#  File Export Configuration Parameters
# -------------------------------------------------------
output_file_option = click.option(
    "--output-file",
    "-o",
    "output_file",
    type=click.Path(writable=True, dir_okay=False),
    help="File to write records to.  If not provided, prints a summary table of the block",
)
format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "protobuf", "replay"]),
    default="json",
    show_default=True,
    help="Output format.  'protobuf' writes the TxRecords wire encoding, 'replay' writes a replay document",
)


def write_records(records: TxRecords, output_file: str, output_format: str):
    """Writes records to a file in the requested format"""
    match output_format:
        case "protobuf":
            with open(output_file, "wb") as out:
                out.write(encode_tx_records(records))
        case "replay":
            with open(output_file, "w") as out:
                json.dump(build_replay_document(records), out, cls=HexEnabledJsonEncoder, indent=4)
        case _:
            with open(output_file, "w") as out:
                out.write(tx_records_to_json(records))

    logger.info(f"Wrote {len(records)} records to {output_file}")


def records_table(records: TxRecords, title: str) -> Table:
    """Builds a table counting records by transaction kind"""
    counts = Counter(record.kind for record in records.records)

    table = Table(title=title)
    table.add_column("Kind")
    table.add_column("Transactions", justify="right")

    for kind in TransactionKind:
        table.add_row(kind.pretty(), str(counts.pop(kind.value, 0)))
    for unknown_kind, count in counts.items():
        table.add_row(f"[red]{unknown_kind}", str(count))

    table.add_row("[bold]Total", f"[bold]{len(records)}")
    return table
