"""ERC-20 settlement asset over web3.

Reads decimals and balances from the token contract and settles transfers
by signing transactions locally with eth_account. The signing account is
the escrow operator: it sends `transfer` for its own funds and
`transferFrom` for funds an owner has approved to it.

Every transfer waits for one confirmation. A reverted receipt, an RPC
error, a receipt timeout or a transport failure (requests' exceptions are
OSErrors) becomes TransferFailed so batch settlement can record it.
"""

from __future__ import annotations

from typing import Any, Optional

from eth_account import Account
from web3 import HTTPProvider, Web3
from web3.exceptions import Web3Exception

from eventfund.errors import TransferFailed
from eventfund.logging import get_logger
from eventfund.policy.params import ChainSettings


log = get_logger(__name__)


ERC20_ABI = [
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "recipient", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "transferFrom",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "recipient", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class Web3SettlementAsset:
    """SettlementAsset backed by an ERC-20 contract.

    Usage:
        asset = Web3SettlementAsset.from_settings(chain_settings())
        asset.decimals()
    """

    def __init__(
        self,
        w3: Any,
        token_address: str,
        account: Any,
        chain_id: int,
        receipt_timeout: int = 300,
    ) -> None:
        self._w3 = w3
        self._address = Web3.to_checksum_address(token_address)
        self._contract = w3.eth.contract(address=self._address, abi=ERC20_ABI)
        self._account = account
        self._chain_id = chain_id
        self._receipt_timeout = receipt_timeout
        self._decimals: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: ChainSettings) -> Web3SettlementAsset:
        w3 = Web3(HTTPProvider(settings.rpc_url))
        account = Account.from_key(settings.private_key)
        return cls(w3, settings.token_address, account, settings.chain_id)

    @property
    def token_id(self) -> str:
        return self._address

    @property
    def operator(self) -> str:
        return self._account.address

    def decimals(self) -> int:
        if self._decimals is None:
            self._decimals = int(self._contract.functions.decimals().call())
        return self._decimals

    def balance_of(self, owner: str) -> int:
        return int(
            self._contract.functions.balanceOf(Web3.to_checksum_address(owner)).call()
        )

    def transfer_from(self, owner: str, recipient: str, amount: int) -> None:
        recipient_cs = Web3.to_checksum_address(recipient)
        if owner.lower() == self._account.address.lower():
            call = self._contract.functions.transfer(recipient_cs, amount)
        else:
            call = self._contract.functions.transferFrom(
                Web3.to_checksum_address(owner), recipient_cs, amount
            )

        try:
            nonce = self._w3.eth.get_transaction_count(self._account.address)
            tx = call.build_transaction({
                "from": self._account.address,
                "nonce": nonce,
                "chainId": self._chain_id,
            })
            signed = self._account.sign_transaction(tx)
            tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except (Web3Exception, ValueError, OSError) as exc:
            log.warning(
                "erc20_transfer_error",
                owner=owner, recipient=recipient, amount=amount, error=str(exc),
            )
            raise TransferFailed(str(exc), recipient=recipient, amount=amount) from exc

        if receipt["status"] != 1:
            raise TransferFailed(
                f"Transfer reverted in tx {tx_hash.hex()}",
                recipient=recipient, amount=amount,
            )
        log.info(
            "erc20_transfer_confirmed",
            tx_hash=tx_hash.hex(), recipient=recipient, amount=amount,
        )
