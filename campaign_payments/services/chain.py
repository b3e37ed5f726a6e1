from web3 import AsyncWeb3
from campaign_payments.schemas import LogEntry
from typing import List


class ChainClient:
    """
    Read-only access to the chain the payments contract lives on.

    Built once in the application lifespan and handed to requests through
    a dependency, so tests can substitute their own.
    """

    def __init__(self, web3: AsyncWeb3):
        self.web3 = web3

    @classmethod
    def from_rpc_url(cls, rpc_url: str) -> "ChainClient":
        return cls(AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url)))

    async def get_transaction_logs(self, transaction_hash: str) -> List[LogEntry]:
        """
        Fetch the event logs of a mined transaction from its receipt.

        Args:
            transaction_hash: 0x-prefixed transaction hash

        Returns:
            List of LogEntry in receipt order
        """
        receipt = await self.web3.eth.get_transaction_receipt(transaction_hash)

        return [
            LogEntry(
                address=log["address"],
                topics=[_as_hex(topic) for topic in log["topics"]],
                data=_as_hex(log["data"]),
                log_index=log.get("logIndex"),
            )
            for log in receipt["logs"]
        ]


def _as_hex(value) -> str:
    if isinstance(value, str):
        return value
    return AsyncWeb3.to_hex(value)
