"""
Share registry: one claim token per canonical pair.

Bindings are created lazily on the first deposit into a pair and are never
replaced afterwards, even if the pool returns to the zero state.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Mapping, Optional

from ..state.balances import Address, Amount, AssetId
from ..state.lp import TokenId
from ..state.pair_key import PairKey
from .config import AmmConfig
from .interfaces import ShareToken

logger = logging.getLogger(__name__)


def _symbol_of(asset: AssetId, length: int) -> str:
    body = asset[2:] if asset.startswith("0x") else asset
    return body[:length].upper()


class ShareRegistry:
    """Owns the pair_key -> share token bindings and delegates mint/burn."""

    def __init__(
        self,
        tokens: ShareToken,
        config: Optional[AmmConfig] = None,
        bindings: Optional[Mapping[PairKey, TokenId]] = None,
    ) -> None:
        self._tokens = tokens
        self._config = config or AmmConfig()
        self._bindings: Dict[PairKey, TokenId] = dict(bindings or {})
        self._lock = threading.Lock()

    def binding_of(self, pair_key: PairKey) -> Optional[TokenId]:
        """Look up the share token for a pair without creating one."""
        return self._bindings.get(pair_key)

    def get_or_create_binding(self, pair_key: PairKey) -> TokenId:
        """Idempotent: returns the existing binding or creates exactly one."""
        with self._lock:
            token_id = self._bindings.get(pair_key)
            if token_id is not None:
                return token_id

            low, high = pair_key
            cfg = self._config
            fmt = {
                "low": low,
                "high": high,
                "low_symbol": _symbol_of(low, cfg.symbol_length),
                "high_symbol": _symbol_of(high, cfg.symbol_length),
            }
            token_id = self._tokens.create(
                cfg.share_name_template.format(**fmt),
                cfg.share_symbol_template.format(**fmt),
                cfg.controller,
            )
            self._bindings[pair_key] = token_id
            logger.info("share token %s bound to pair %s/%s", token_id, low, high)
            return token_id

    def mint(self, token_id: TokenId, to: Address, amount: Amount) -> None:
        self._tokens.mint(token_id, to, amount)

    def burn(self, token_id: TokenId, owner: Address, amount: Amount) -> None:
        self._tokens.burn(token_id, owner, amount)

    def bindings(self) -> Dict[PairKey, TokenId]:
        """Copy of all bindings."""
        return dict(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
