import random

import pytest

from cctup.txstream.types import BigInt, Block, Call, TransactionTrace

from tests.utils import CONTRACT_ADDRESS, SENDER_ADDRESS


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address() -> bytes:
        return random.randbytes(20)

    return _generate_random_address


@pytest.fixture(name="internal_call")
def fixture_internal_call():
    def _generate_call(index: int = 1) -> Call:
        return Call(
            index=index,
            parent_index=0,
            depth=1,
            call_type="CALL",
            caller=CONTRACT_ADDRESS,
            address=SENDER_ADDRESS,
        )

    return _generate_call


@pytest.fixture(name="make_trace")
def fixture_make_trace():
    def _generate_trace(**overrides) -> TransactionTrace:
        trace_kwargs = {
            "hash": random.randbytes(32),
            "from_address": SENDER_ADDRESS,
            "to": CONTRACT_ADDRESS,
            "input": b"",
            "value": BigInt(data=bytes.fromhex("0de0b6b3a7640000")),
            "gas_limit": 21000,
            "gas_price": BigInt(data=bytes.fromhex("04a817c800")),
            "max_fee_per_gas": None,
            "max_priority_fee_per_gas": None,
            "type": 0,
        }
        trace_kwargs.update(overrides)
        return TransactionTrace(**trace_kwargs)

    return _generate_trace


@pytest.fixture(name="make_block")
def fixture_make_block():
    def _generate_block(traces: list[TransactionTrace], number: int = 16217506) -> Block:
        return Block(number=number, hash=random.randbytes(32), transaction_traces=traces)

    return _generate_block
