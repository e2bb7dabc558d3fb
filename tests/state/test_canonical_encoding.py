from __future__ import annotations

import hashlib

import pytest

from pairswap.state.canonical import canonical_json_bytes, domain_tag, tagged_digest


def test_canonical_json_sorts_keys_without_whitespace() -> None:
    assert canonical_json_bytes({"b": 1, "a": [2, "x", None]}) == b'{"a":[2,"x",null],"b":1}'


def test_canonical_json_keeps_big_ints_exact() -> None:
    assert canonical_json_bytes({"k": 10**40}) == b'{"k":10000000000000000000000000000000000000000}'


def test_canonical_json_is_utf8_not_escaped() -> None:
    assert canonical_json_bytes(["Ω"]) == b'["\xce\xa9"]'


def test_canonical_json_rejects_floats_with_path() -> None:
    with pytest.raises(TypeError, match=r"\$\.pools\[1\]: floats"):
        canonical_json_bytes({"pools": [1, 1.5]})


def test_canonical_json_rejects_surrogates() -> None:
    with pytest.raises(TypeError, match="surrogate"):
        canonical_json_bytes({"s": "\ud800"})
    with pytest.raises(TypeError, match="surrogate"):
        canonical_json_bytes({"\udfff": 1})


def test_canonical_json_rejects_non_json_types() -> None:
    with pytest.raises(TypeError, match="object keys must be str"):
        canonical_json_bytes({1: "x"})
    with pytest.raises(TypeError, match="unsupported type bytes"):
        canonical_json_bytes([b"raw"])


def test_domain_tag() -> None:
    assert domain_tag("state_root") == b"pairswap:state_root:v1\x00"
    assert domain_tag("state_root", version=2) == b"pairswap:state_root:v2\x00"
    for bad in ("", "State", "a:b", "a\x00b"):
        with pytest.raises(ValueError):
            domain_tag(bad)
    with pytest.raises(ValueError):
        domain_tag("state_root", version=0)


def test_tagged_digest_is_sha256_of_tag_and_body() -> None:
    value = {"version": 1, "pools": []}
    expected = hashlib.sha256(b"pairswap:state_root:v1\x00" + b'{"pools":[],"version":1}').hexdigest()
    assert tagged_digest("state_root", value) == "0x" + expected
    assert tagged_digest("snapshot", value) != tagged_digest("state_root", value)
