import logging
from pathlib import Path

import click
import requests
from rich.console import Console

from cctup.txstream.cli.utils import (
    cli_logger_config,
    format_option,
    group_options,
    json_rpc_option,
    no_traces_option,
    output_file_option,
    records_table,
    verbose_option,
    write_records,
)
from cctup.txstream.encoding import decode_tx_records
from cctup.txstream.exceptions import BlockInputError, EncodingError, RPCError
from cctup.txstream.mapper import map_transactions
from cctup.txstream.sources import fetch_block, load_block_file
from cctup.txstream.types import Block

root_logger = logging.getLogger("cctup")
logger = root_logger.getChild("txstream").getChild("cli")


def _emit(block: Block, output_file: str | None, output_format: str):
    records = map_transactions(block)

    if output_file:
        write_records(records, output_file, output_format)
    else:
        Console().print(records_table(records, title=f"Block {block.number}"))


@click.group()
def txstream_cli():
    """Command Line Interface for classifying & normalizing block transactions"""


@txstream_cli.command(name="map-block")
@click.argument("block_file", type=click.Path(exists=True, dir_okay=False))
@group_options(output_file_option, format_option, verbose_option)
def map_block(block_file: str, output_file: str | None, output_format: str, verbose: bool):
    """
    Map a block JSON file to transaction records.

    BLOCK_FILE holds an eth_getBlockByNumber result with full transactions, or an object with 'block' and
    'traces' keys where 'traces' is the debug_traceBlockByNumber callTracer result.
    """
    cli_logger_config(root_logger, verbose)

    try:
        block = load_block_file(block_file)
    except BlockInputError as e:
        logger.error(e)
        raise SystemExit(1)

    _emit(block, output_file, output_format)


@txstream_cli.command(name="fetch")
@click.argument("block_number", type=int)
@group_options(json_rpc_option, no_traces_option, output_file_option, format_option, verbose_option)
def fetch(
    block_number: int,
    json_rpc: str | None,
    no_traces: bool,
    output_file: str | None,
    output_format: str,
    verbose: bool,
):  # pylint: disable=too-many-arguments
    """Fetch a block from a JSON-RPC node and map its transactions to records"""
    cli_logger_config(root_logger, verbose)

    if not json_rpc:
        logger.error("RPC URL not specified... Set with '--json-rpc' option or 'JSON_RPC' environment variable")
        raise SystemExit(1)

    try:
        block = fetch_block(json_rpc, block_number, with_traces=not no_traces)
    except (BlockInputError, RPCError, requests.RequestException) as e:
        logger.error(e)
        raise SystemExit(1)

    _emit(block, output_file, output_format)


@txstream_cli.command(name="inspect")
@click.argument("protobuf_file", type=click.Path(exists=True, dir_okay=False))
def inspect(protobuf_file: str):
    """Decode a protobuf TxRecords file and summarize its records"""
    cli_logger_config(root_logger)

    try:
        records = decode_tx_records(Path(protobuf_file).read_bytes())
    except EncodingError as e:
        logger.error(e)
        raise SystemExit(1)

    Console().print(records_table(records, title=Path(protobuf_file).name))
