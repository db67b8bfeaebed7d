"""Unit tests for bucket counts, filtered lists and dashboard tiles"""

import logging

import pytest

from rto_validity.domain.aggregation import (
    DashboardTile,
    aggregate,
    dashboard_tiles,
    filter_expiring_soon,
    filter_pending_payment,
    filter_records,
    filter_tile,
)
from rto_validity.domain.expiry import UrgencyBucket
from rto_validity.domain.models import Context


@pytest.fixture
def permits(permit_factory):
    """One permit per Part A bucket boundary"""
    return [
        permit_factory("NP-EXPIRED", part_a_days=-5),
        permit_factory("NP-TODAY", part_a_days=0),
        permit_factory("NP-WEEK", part_a_days=7),
        permit_factory("NP-EIGHT", part_a_days=8),
        permit_factory("NP-SIXTY", part_a_days=60),
        permit_factory("NP-LATER", part_a_days=61),
    ]


def test_aggregate_counts_every_bucket(permits, today):
    counts = aggregate(permits, Context.PART_A, today)

    assert counts == {
        UrgencyBucket.EXPIRED: 1,
        UrgencyBucket.CRITICAL: 2,
        UrgencyBucket.WARNING: 2,
        UrgencyBucket.ATTENTION: 0,
        UrgencyBucket.VALID: 1,
    }
    assert sum(counts.values()) == len(permits)


def test_aggregate_empty_input_has_all_buckets(today):
    counts = aggregate([], Context.DRIVING_LICENCE, today)

    assert set(counts) == set(UrgencyBucket)
    assert all(count == 0 for count in counts.values())


def test_filter_records_matches_aggregate(permits, today):
    """Test each bucket list has exactly as many records as its count"""
    counts = aggregate(permits, Context.PART_A, today)

    for bucket in UrgencyBucket:
        assert len(filter_records(permits, bucket, Context.PART_A, today)) == counts[bucket]


def test_filter_records_sorted_earliest_first(permits, today):
    critical = filter_records(list(reversed(permits)), UrgencyBucket.CRITICAL, Context.PART_A, today)
    assert [p.permit_id for p in critical] == ["NP-TODAY", "NP-WEEK"]


def test_filter_expiring_soon_uses_context_buckets(permits, today):
    soon = filter_expiring_soon(permits, Context.PART_A, today)
    assert [p.permit_id for p in soon] == ["NP-TODAY", "NP-WEEK", "NP-EIGHT", "NP-SIXTY"]


def test_unissued_part_is_excluded(permit_factory, today):
    """Test a permit with no Part B is in no Part B bucket"""
    records = [permit_factory("NP-1", part_b_days=None), permit_factory("NP-2", part_b_days=10)]

    counts = aggregate(records, Context.PART_B, today)

    assert sum(counts.values()) == 1
    assert counts[UrgencyBucket.WARNING] == 1


def test_malformed_records_are_excluded_with_warning(permit_factory, licence_factory, today, caplog):
    """Test records that cannot answer for the context are logged and skipped"""
    records = [permit_factory("NP-1", part_a_days=3), licence_factory("DL-1", licence_days=3), object()]

    with caplog.at_level(logging.WARNING):
        counts = aggregate(records, Context.PART_A, today)

    assert counts[UrgencyBucket.CRITICAL] == 1
    assert sum(counts.values()) == 1
    assert "Excluding malformed record" in caplog.text


def test_filter_pending_payment(permit_factory):
    records = [
        permit_factory("NP-PAID", total=20000, paid=20000),
        permit_factory("NP-OWES", total=20000, paid=5000),
        permit_factory("NP-FREE", total=0, paid=0),
    ]

    assert [p.permit_id for p in filter_pending_payment(records)] == ["NP-OWES"]


@pytest.fixture
def dashboard_permits(permit_factory):
    return [
        permit_factory("NP-1", part_a_days=400, part_b_days=200),
        permit_factory("NP-2", part_a_days=30, part_b_days=5, total=20000, paid=5000),
        permit_factory("NP-3", part_a_days=-3, part_b_days=None),
        permit_factory("NP-4", part_a_days=100, part_b_days=20),
    ]


def test_dashboard_tiles(dashboard_permits, today):
    tiles = dashboard_tiles(dashboard_permits, today)

    assert tiles == {
        DashboardTile.TOTAL: 4,
        DashboardTile.ACTIVE: 2,
        DashboardTile.PART_A_EXPIRING: 1,
        DashboardTile.PART_B_EXPIRING: 2,
        DashboardTile.PENDING_PAYMENT: 1,
    }


def test_tile_counts_equal_tile_lists(dashboard_permits, today):
    """Test the number on every tile is the length of the list behind it"""
    tiles = dashboard_tiles(dashboard_permits, today)

    for tile in DashboardTile:
        assert tiles[tile] == len(filter_tile(dashboard_permits, tile, today))


def test_expiring_tile_sorted_earliest_first(dashboard_permits, today):
    part_b = filter_tile(dashboard_permits, DashboardTile.PART_B_EXPIRING, today)
    assert [p.permit_id for p in part_b] == ["NP-2", "NP-4"]


def test_aggregate_uses_the_rules_it_is_given(permits, today):
    with pytest.raises(KeyError):
        aggregate(permits, Context.PART_A, today, rules={})
