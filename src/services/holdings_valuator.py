from __future__ import annotations

from decimal import Decimal
from functools import partial

from clients.solana_rpc import SolanaRpcClient
from constants import LAMPORTS_PER_SOL, SOL_MINT, TOKEN_PROGRAM_ID
from domain.valuation import AssetId, HoldingValue, TreasuryAddress, sum_values

from .call_executor import CallExecutor
from .price_service import PriceService


class HoldingsValuator:
    def __init__(
        self,
        rpc: SolanaRpcClient,
        price_service: PriceService,
        executor: CallExecutor,
        *,
        token_program_id: str = TOKEN_PROGRAM_ID,
    ) -> None:
        self.rpc = rpc
        self.price_service = price_service
        self.executor = executor
        self.token_program_id = token_program_id

    def holdings(self, address: TreasuryAddress) -> list[HoldingValue]:
        """Native balance first, then every token account, in RPC order."""
        lamports = self.executor.execute(partial(self.rpc.get_balance, address))
        native = self._price_holding(AssetId(SOL_MINT), Decimal(lamports) / LAMPORTS_PER_SOL)

        token_accounts = self.executor.execute(
            partial(self.rpc.get_token_accounts_by_owner, address, program_id=self.token_program_id)
        )
        return [native, *(self._price_holding(AssetId(mint), quantity) for mint, quantity in token_accounts)]

    def valuate(self, address: TreasuryAddress) -> Decimal:
        return sum_values(self.holdings(address))

    def _price_holding(self, asset_id: AssetId, quantity: Decimal) -> HoldingValue:
        resolution = self.price_service.resolve(asset_id)
        return HoldingValue(
            asset_id=asset_id,
            quantity=quantity,
            unit_price=resolution.unit_price,
            price_available=resolution.available,
        )


__all__ = ["HoldingsValuator"]
