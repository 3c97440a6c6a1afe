import hashlib
from dataclasses import replace
from datetime import datetime

from src.timekeeping.timekeeping.ledger.hashing import canonical_payload, compute_chain_hash, verify_record_hash


def test_canonical_payload_ignores_key_order_and_spacing():
    assert canonical_payload({"b": 1, "a": "x"}) == '{"a":"x","b":1}'
    assert canonical_payload('{ "b": 1,  "a": "x" }') == '{"a":"x","b":1}'
    assert canonical_payload(None) == ""


def test_chain_hash_is_sha256_of_previous_plus_payload():
    expected = hashlib.sha256(('abc' + '{"a":1}').encode("utf-8")).hexdigest()

    assert compute_chain_hash("abc", {"a": 1}) == expected
    assert compute_chain_hash(None, {"a": 1}) == hashlib.sha256(b'{"a":1}').hexdigest()


def test_verify_record_hash_detects_tampered_payload(make_chain):
    record = make_chain([("card-001", "gate-1", datetime(2025, 1, 6, 8, 0), "time_in")])[0]

    assert verify_record_hash(record)
    assert verify_record_hash(replace(record, hash_chain=record.hash_chain.upper()))
    assert not verify_record_hash(replace(record, raw_payload={**record.raw_payload, "token": "card-999"}))
    assert not verify_record_hash(replace(record, hash_previous="f" * 64))
