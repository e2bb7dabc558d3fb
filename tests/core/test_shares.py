from __future__ import annotations

import threading

from pairswap.core import AmmConfig, ShareRegistry
from pairswap.integration import InMemoryShareTokens

LOW = "0x" + "ab" * 32
HIGH = "0x" + "cd" * 32
KEY = (LOW, HIGH)


class _CountingTokens(InMemoryShareTokens):
    def __init__(self) -> None:
        super().__init__()
        self.created = 0

    def create(self, name, symbol, controller):
        self.created += 1
        return super().create(name, symbol, controller)


def test_binding_is_created_once() -> None:
    tokens = _CountingTokens()
    registry = ShareRegistry(tokens)
    assert registry.binding_of(KEY) is None

    first = registry.get_or_create_binding(KEY)
    second = registry.get_or_create_binding(KEY)
    assert first == second == "share-1"
    assert tokens.created == 1
    assert registry.bindings() == {KEY: "share-1"}
    assert len(registry) == 1


def test_token_metadata_from_config() -> None:
    tokens = InMemoryShareTokens()
    registry = ShareRegistry(tokens)
    token_id = registry.get_or_create_binding(KEY)
    info = tokens.tokens[token_id]
    assert info.name == f"{LOW}/{HIGH} Liquidity"
    assert info.symbol == "ABABAB-CDCDCD-LP"
    assert info.controller == "pairswap"


def test_custom_templates() -> None:
    tokens = InMemoryShareTokens()
    config = AmmConfig(
        controller="amm-1",
        share_name_template="LP {low_symbol}/{high_symbol}",
        share_symbol_template="{low_symbol}{high_symbol}",
        symbol_length=2,
    )
    registry = ShareRegistry(tokens, config)
    info = tokens.tokens[registry.get_or_create_binding(KEY)]
    assert (info.name, info.symbol, info.controller) == ("LP AB/CD", "ABCD", "amm-1")


def test_distinct_pairs_get_distinct_tokens() -> None:
    registry = ShareRegistry(InMemoryShareTokens())
    other = (LOW, "0x" + "ef" * 32)
    assert registry.get_or_create_binding(KEY) != registry.get_or_create_binding(other)


def test_existing_bindings_are_kept() -> None:
    tokens = _CountingTokens()
    registry = ShareRegistry(tokens, bindings={KEY: "share-7"})
    assert registry.get_or_create_binding(KEY) == "share-7"
    assert tokens.created == 0


def test_mint_and_burn_delegate() -> None:
    tokens = InMemoryShareTokens()
    registry = ShareRegistry(tokens)
    token_id = registry.get_or_create_binding(KEY)
    registry.mint(token_id, "alice", 10)
    registry.burn(token_id, "alice", 4)
    assert tokens.balance_of("alice", token_id) == 6
    assert tokens.total_supply(token_id) == 6


def test_concurrent_creation_yields_one_binding() -> None:
    tokens = _CountingTokens()
    registry = ShareRegistry(tokens)
    results = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(registry.get_or_create_binding(KEY))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert tokens.created == 1
    assert set(results) == {"share-1"}
