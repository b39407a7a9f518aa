"""
Tests for the grouping engine.
"""
import pytest

from dashboards.services.aggregation import (
    AVG, MAX, MIN, SUM, UNKNOWN,
    Bucket, GroupSpec, Measure, aggregate, totals, zero_filled,
)

SALES = [
    {'crop': 'Tomato', 'total': '100', 'quantity': '10 kg'},
    {'crop': 'Onion', 'total': 300, 'quantity': '30 kg'},
    {'crop': 'Tomato', 'total': 50, 'quantity': 'five'},
    {'crop': None, 'total': 20, 'quantity': '2'},
    {'crop': '  ', 'total': 5, 'quantity': '1'},
]


def test_groups_and_orders_by_primary_measure():
    buckets = aggregate(SALES, GroupSpec('crop', (Measure('total'),), primary='total'))
    assert [b.key for b in buckets] == ['Onion', 'Tomato', UNKNOWN]
    assert buckets[1].sum('total') == 150.0
    assert buckets[1].count == 2


def test_missing_keys_group_as_unknown():
    buckets = aggregate(SALES, GroupSpec('crop', (Measure('total'),), primary='total'))
    unknown = buckets[-1]
    assert unknown.count == 2
    assert unknown.sum('total') == 25.0


def test_unparsable_measures_count_as_zero():
    bucket = totals(SALES, [Measure('quantity')])
    assert bucket.sum('quantity') == 43.0


def test_ties_keep_first_seen_order():
    records = [{'k': 'b', 'v': 1}, {'k': 'a', 'v': 1}, {'k': 'c', 'v': 2}]
    buckets = aggregate(records, GroupSpec('k', (Measure('v'),), primary='v'))
    assert [b.key for b in buckets] == ['c', 'b', 'a']


def test_orders_by_count_without_primary():
    buckets = aggregate(SALES, GroupSpec('crop'))
    assert buckets[0].count == 2


def test_reductions():
    price = Measure('price', reducers=(SUM, AVG, MIN, MAX))
    records = [{'price': 10}, {'price': 30}, {'price': '20 per kg'}]
    bucket = totals(records, [price])
    assert bucket.reduced(price) == {
        'price': 60.0, 'avg_price': 20.0, 'min_price': 10.0, 'max_price': 30.0,
    }


def test_empty_bucket_reduces_to_zero():
    bucket = Bucket(key='x')
    assert bucket.avg('amount') == 0.0
    assert bucket.min('amount') == 0.0
    assert bucket.as_dict([Measure('amount', reducers=(SUM, AVG))], key_name='category') == {
        'category': 'x', 'count': 0, 'amount': 0.0, 'avg_amount': 0.0,
    }


def test_zero_filled_keeps_key_order():
    buckets = aggregate([{'m': 3}, {'m': 1}], GroupSpec('m', sort=False))
    filled = zero_filled(buckets, range(1, 5))
    assert [(b.key, b.count) for b in filled] == [(1, 1), (2, 0), (3, 1), (4, 0)]


def test_callable_key_and_source():
    spec = GroupSpec(lambda r: r['crop'] or 'none', (Measure('double', lambda r: r['total'] * 2),))
    buckets = aggregate([{'crop': 'A', 'total': 2}], spec)
    assert buckets[0].sum('double') == 4.0


def test_unknown_reducer_rejected():
    with pytest.raises(ValueError):
        Measure('amount', reducers=('median',))


def test_model_instances_are_read_by_attribute():
    class Row:
        crop = 'Tomato'
        total = 12

    bucket = aggregate([Row()], GroupSpec('crop', (Measure('total'),)))[0]
    assert bucket.key == 'Tomato'
    assert bucket.sum('total') == 12.0
