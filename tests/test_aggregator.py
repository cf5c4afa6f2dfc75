"""
Unit tests for the aggregator.
"""

import unittest
from unittest.mock import patch
import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from feed_aggregator.aggregator import PLACEHOLDER_SOURCE, Aggregator, placeholder_record
from feed_aggregator.models import ArticleRecord, SnapshotStatus, SourceBatch


def make_record(id, published, source="Feed", title=None):
    return ArticleRecord(
        id=id,
        title=title or id,
        link=id,
        excerpt="",
        source=source,
        published=published,
    )


class TestAggregator(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures."""
        self.aggregator = Aggregator()

    def test_duplicates_first_source_wins(self):
        first = make_record("https://example.com/a", 100, source="Retail Dive")
        second = make_record("https://example.com/a", 200, source="RetailWire")
        batches = [
            SourceBatch("Retail Dive", (first,)),
            SourceBatch("RetailWire", (second, make_record("https://example.com/b", 50, source="RetailWire"))),
        ]

        snapshot = self.aggregator.aggregate(batches)

        self.assertEqual([item.id for item in snapshot.items], ["https://example.com/a", "https://example.com/b"])
        self.assertIs(snapshot.items[0], first)
        self.assertEqual(snapshot.duplicates_dropped, 1)

    def test_duplicates_within_one_source(self):
        batch = SourceBatch("Feed", (make_record("x", 1, title="one"), make_record("x", 2, title="two")))
        snapshot = self.aggregator.aggregate([batch])

        self.assertEqual(len(snapshot.items), 1)
        self.assertEqual(snapshot.items[0].title, "one")

    def test_sorted_newest_first(self):
        batch = SourceBatch("Feed", tuple(make_record(f"r{p}", p) for p in (5, 1, 9, 3, 7)))
        snapshot = self.aggregator.aggregate([batch])

        published = [item.published for item in snapshot.items]
        self.assertEqual(published, [9, 7, 5, 3, 1])
        for a, b in zip(snapshot.items, snapshot.items[1:]):
            self.assertGreaterEqual(a.published, b.published)

    def test_ties_keep_input_order(self):
        batches = [
            SourceBatch("A", (make_record("a1", 10), make_record("a2", 20))),
            SourceBatch("B", (make_record("b1", 10), make_record("b2", 20))),
        ]
        snapshot = self.aggregator.aggregate(batches)

        self.assertEqual([item.id for item in snapshot.items], ["a2", "b2", "a1", "b1"])

    def test_bounded_to_most_recent(self):
        records = tuple(make_record(f"r{i}", i) for i in range(700))
        snapshot = self.aggregator.aggregate([SourceBatch("Feed", records)])

        self.assertEqual(len(snapshot.items), 600)
        self.assertEqual(snapshot.truncated, 100)
        self.assertEqual({item.published for item in snapshot.items}, set(range(100, 700)))

    def test_custom_bound(self):
        records = tuple(make_record(f"r{i}", i) for i in range(10))
        snapshot = Aggregator(max_items=3).aggregate([SourceBatch("Feed", records)])

        self.assertEqual([item.published for item in snapshot.items], [9, 8, 7])

    def test_idempotent(self):
        batches = [
            SourceBatch("A", (make_record("a", 3), make_record("dup", 3))),
            SourceBatch("B", (make_record("dup", 5), make_record("b", 1))),
        ]
        first = self.aggregator.aggregate(batches)
        second = self.aggregator.aggregate(batches)

        self.assertEqual(first.items, second.items)
        self.assertEqual(first.to_dict()["items"], second.to_dict()["items"])

    @patch('feed_aggregator.aggregator.now_ms', return_value=1234)
    def test_generated_at(self, mock_now):
        snapshot = self.aggregator.aggregate([SourceBatch("A", (make_record("a", 1),))])

        self.assertEqual(snapshot.generated_at, 1234)
        self.assertEqual(snapshot.to_dict()["generatedAt"], 1234)

    def test_status_ok(self):
        batches = [SourceBatch("A", error="HTTP 500"), SourceBatch("B", (make_record("b", 1),))]
        snapshot = self.aggregator.aggregate(batches)

        self.assertEqual(snapshot.status, SnapshotStatus.OK)
        self.assertEqual(snapshot.failed_sources, ("A",))

    def test_status_empty_without_placeholder(self):
        snapshot = self.aggregator.aggregate([SourceBatch("A"), SourceBatch("B", error="HTTP 404")])

        self.assertEqual(snapshot.status, SnapshotStatus.EMPTY)
        self.assertEqual(snapshot.items, ())
        self.assertEqual(snapshot.to_dict()["items"], [])

    def test_status_failed(self):
        snapshot = self.aggregator.aggregate([SourceBatch("A", error="HTTP 500"), SourceBatch("B", error="timeout")])

        self.assertEqual(snapshot.status, SnapshotStatus.FAILED)
        self.assertEqual(snapshot.failed_sources, ("A", "B"))

    def test_no_batches(self):
        snapshot = self.aggregator.aggregate([])
        self.assertEqual(snapshot.status, SnapshotStatus.EMPTY)

    def test_placeholder_on_empty(self):
        aggregator = Aggregator(placeholder_on_empty=True)
        snapshot = aggregator.aggregate([SourceBatch("A", error="HTTP 500")])

        self.assertEqual(snapshot.status, SnapshotStatus.FAILED)
        self.assertEqual(len(snapshot.items), 1)
        self.assertEqual(snapshot.items[0].source, PLACEHOLDER_SOURCE)
        self.assertEqual(snapshot.items[0].link, "#")

    def test_placeholder_not_used_when_records_exist(self):
        aggregator = Aggregator(placeholder_on_empty=True)
        snapshot = aggregator.aggregate([SourceBatch("A", (make_record("a", 1),))])

        self.assertEqual([item.id for item in snapshot.items], ["a"])

    def test_placeholder_record(self):
        record = placeholder_record(1700000000000)

        self.assertEqual(record.id, "smoke-1700000000000")
        self.assertEqual(record.published, 1700000000000)
        self.assertTrue(record.title)


if __name__ == '__main__':
    unittest.main()
