from __future__ import annotations

from vm_manifest.services.query_filter import filter_records, matches_query


ROWS = [
    {"hostname": "prod-web-01", "vapp": "web", "cpu": 2},
    {"hostname": "prod-db-01", "vapp": "db", "cpu": 4},
    {"hostname": "test-web-01", "vapp": "apps/web", "cpu": 12},
]


def test_empty_or_missing_query_accepts_everything():
    assert matches_query(ROWS[0], None)
    assert matches_query(ROWS[0], {})


def test_exact_match():
    assert matches_query(ROWS[1], {"vapp": "db"})
    assert not matches_query(ROWS[1], {"vapp": "web"})


def test_suffix_match():
    assert matches_query(ROWS[2], {"vapp": "web"})
    assert matches_query(ROWS[0], {"hostname": "web-01"})
    assert not matches_query(ROWS[0], {"hostname": "prod"})


def test_integer_values_match_exactly_on_their_text():
    assert matches_query(ROWS[0], {"cpu": "2"})
    assert not matches_query(ROWS[1], {"cpu": "2"})


def test_integer_values_never_suffix_match():
    assert not matches_query(ROWS[2], {"cpu": "2"})
    assert matches_query(ROWS[2], {"cpu": "12"})


def test_suffix_applies_to_text_that_looks_numeric():
    # IP アドレスは int に変換されないので文字列として suffix 一致する
    assert matches_query({"address": "10.0.0.12"}, {"address": "0.12"})


def test_all_constraints_must_hold():
    assert matches_query(ROWS[0], {"vapp": "web", "hostname": "01"})
    assert not matches_query(ROWS[0], {"vapp": "web", "hostname": "02"})


def test_missing_key_rejects():
    assert not matches_query(ROWS[0], {"folder": "/"})


def test_filter_records_keeps_order():
    out = filter_records(ROWS, {"vapp": "web"})
    assert [r["hostname"] for r in out] == ["prod-web-01", "test-web-01"]


def test_filter_is_idempotent():
    query = {"hostname": "01", "vapp": "web"}
    once = filter_records(ROWS, query)
    assert filter_records(once, query) == once
