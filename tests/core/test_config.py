from __future__ import annotations

import pytest

from pairswap import AmmConfig, load_config
from pairswap.core.config import config_from_mapping
from pairswap.core.cpmm import SCALE


def test_defaults() -> None:
    config = AmmConfig()
    assert config.scale == SCALE == 10**18
    assert config.null_asset == "0x" + "00" * 32
    assert config.null_address == "0x" + "00" * 20
    assert config.check_invariants is True


def test_load_yaml(tmp_path) -> None:
    path = tmp_path / "pairswap.yaml"
    path.write_text(
        "scale: 1000000\n"
        "controller: amm-main\n"
        'null_asset: "0x0000"\n'
        "symbol_length: 4\n"
        "check_invariants: false\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.scale == 1_000_000
    assert config.controller == "amm-main"
    assert config.null_asset == "0x0000"
    assert config.symbol_length == 4
    assert config.check_invariants is False
    # Untouched fields keep their defaults.
    assert config.share_symbol_template == AmmConfig().share_symbol_template


def test_empty_yaml_gives_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == AmmConfig()


def test_unquoted_hex_is_rejected(tmp_path) -> None:
    # YAML reads 0x-prefixed scalars as integers.
    path = tmp_path / "bad.yaml"
    path.write_text("null_asset: 0x00\n", encoding="utf-8")
    with pytest.raises(ValueError, match="null_asset must be a string"):
        load_config(path)


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValueError, match="unknown config keys: fee_bps"):
        config_from_mapping({"fee_bps": 30})


def test_non_mapping_rejected(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="config must be a mapping"):
        load_config(path)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"scale": 0},
        {"scale": True},
        {"symbol_length": -1},
        {"controller": ""},
        {"controller": 5},
        {"check_invariants": "yes"},
        {"event_log_size": -1},
        {"event_log_size": False},
    ],
)
def test_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        AmmConfig(**kwargs)
