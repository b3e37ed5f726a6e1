from types import SimpleNamespace

from eth_utils import decode_hex

from campaign_payments.services.chain import ChainClient
from campaign_payments.services.decoder import find_payment_event
from factories import CONTRACT_ADDRESS, SENDER_ADDRESS, TX_HASH, build_payment_log, build_transfer_log


def _receipt_log(entry, log_index):
    """Shape a log the way web3 returns it: bytes topics and data."""
    return {
        "address": entry["address"],
        "topics": [decode_hex(topic) for topic in entry["topics"]],
        "data": decode_hex(entry["data"]),
        "logIndex": log_index,
    }


class FakeEth:
    def __init__(self, receipt):
        self.receipt = receipt
        self.requested = []

    async def get_transaction_receipt(self, transaction_hash):
        self.requested.append(transaction_hash)
        return self.receipt


async def test_get_transaction_logs_reads_receipt():
    receipt = {"logs": [_receipt_log(build_transfer_log(), 4), _receipt_log(build_payment_log(), 5)]}
    eth = FakeEth(receipt)
    client = ChainClient(SimpleNamespace(eth=eth))

    logs = await client.get_transaction_logs(TX_HASH)

    assert eth.requested == [TX_HASH]
    assert [log.log_index for log in logs] == [4, 5]
    assert logs[1].topics == build_payment_log()["topics"]
    assert logs[1].data == build_payment_log()["data"]


async def test_fetched_logs_decode_like_alert_logs():
    receipt = {"logs": [_receipt_log(build_payment_log(amount=5_000_000), 9)]}
    client = ChainClient(SimpleNamespace(eth=FakeEth(receipt)))

    logs = await client.get_transaction_logs(TX_HASH)
    event = find_payment_event(logs, CONTRACT_ADDRESS)

    assert event.amount == 5_000_000
    assert event.sender == SENDER_ADDRESS
    assert event.log_index == 9


async def test_empty_receipt():
    client = ChainClient(SimpleNamespace(eth=FakeEth({"logs": []})))

    assert await client.get_transaction_logs(TX_HASH) == []
