# pylint: disable=no-name-in-module
from typing import Union

from web3 import AsyncWeb3
from web3.types import TxParams

to_checksum_address = AsyncWeb3.to_checksum_address


async def is_eip1559(w3: 'AsyncWeb3') -> bool:
    fee = await w3.eth.fee_history(1, 'latest')
    return fee['baseFeePerGas'][0] != 0


async def fill_gas_price(w3: 'AsyncWeb3', transaction: TxParams) -> TxParams:
    # EIP-1559 chains get max fee / priority fee, legacy chains a gas price
    if any(key in transaction for key in ('gasPrice', 'maxFeePerGas')):
        return transaction
    if await is_eip1559(w3):
        priority = await w3.eth.max_priority_fee
        block = await w3.eth.get_block('latest')
        transaction['maxPriorityFeePerGas'] = priority
        transaction['maxFeePerGas'] = block['baseFeePerGas'] * 2 + priority
    else:
        transaction['gasPrice'] = await w3.eth.gas_price
    return transaction


async def fill_nonce(w3: 'AsyncWeb3', transaction: TxParams) -> TxParams:
    if 'from' in transaction and 'nonce' not in transaction:
        transaction['nonce'] = await w3.eth.get_transaction_count(transaction['from'], 'pending')
    return transaction


async def fill_gas(w3: 'AsyncWeb3', transaction: TxParams) -> TxParams:
    if 'gas' not in transaction:
        transaction['gas'] = await w3.eth.estimate_gas(transaction)
    return transaction


def to_hex(value: Union[bytes, str]) -> str:
    if isinstance(value, str):
        return value if value.startswith('0x') else f"0x{value}"
    return AsyncWeb3.to_hex(value)
