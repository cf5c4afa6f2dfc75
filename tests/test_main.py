"""
Tests for the command line entry point.
"""

import unittest
from unittest.mock import MagicMock, patch
import tempfile
import shutil
import json
import logging
import os
import sys

import responses

# Add project root to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from feed_aggregator.exceptions import EmptySnapshotError
from feed_aggregator.main import EXIT_CONFIG_ERROR, EXIT_EMPTY_SNAPSHOT, main, run_once
from feed_aggregator.models import Snapshot, SnapshotStatus
from feed_aggregator.pipeline import FeedPipeline
from feed_aggregator.storage_manager import SnapshotWriter

FEED_URL = "https://www.retaildive.com/feeds/news/"
FEED_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel>
  <item><title>Story</title><link>https://www.retaildive.com/news/story/1/</link>
  <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate></item>
</channel></rss>"""


class TestRunOnce(unittest.TestCase):

    def setUp(self):
        self.pipeline = MagicMock(spec=FeedPipeline)
        self.writer = MagicMock(spec=SnapshotWriter)

    def test_writes_snapshot(self):
        snapshot = Snapshot(generated_at=1, items=(), status=SnapshotStatus.OK)
        self.pipeline.run.return_value = snapshot

        self.assertIs(run_once(self.pipeline, self.writer), snapshot)
        self.writer.write.assert_called_once_with(snapshot)

    def test_empty_snapshot_written_by_default(self):
        snapshot = Snapshot(generated_at=1, items=(), status=SnapshotStatus.EMPTY)
        self.pipeline.run.return_value = snapshot

        run_once(self.pipeline, self.writer)
        self.writer.write.assert_called_once_with(snapshot)

    def test_fail_on_empty(self):
        self.pipeline.run.return_value = Snapshot(generated_at=1, items=(), status=SnapshotStatus.FAILED)

        with self.assertRaises(EmptySnapshotError) as cm:
            run_once(self.pipeline, self.writer, fail_on_empty=True)

        self.assertEqual(cm.exception.status, SnapshotStatus.FAILED)
        self.writer.write.assert_not_called()


class TestMain(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_dir = os.path.join(self.temp_dir, 'config')
        os.makedirs(self.config_dir)
        self.output_path = os.path.join(self.temp_dir, 'data', 'articles.json')

        self._write('settings.json', {
            "output": {"path": self.output_path},
            "logging": {"level": "INFO", "log_dir": None},
            "aggregation": {"placeholder_on_empty": False}
        })
        self._write('feeds.json', {
            "feeds": [{"name": "Retail Dive", "url": FEED_URL}],
            "keywords": ["ai"],
            "brands": []
        })

        self.root_handlers = list(logging.getLogger().handlers)

    def tearDown(self):
        """Clean up test fixtures."""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            if handler not in self.root_handlers:
                root_logger.removeHandler(handler)
        shutil.rmtree(self.temp_dir)

    def _write(self, name, data):
        with open(os.path.join(self.config_dir, name), 'w', encoding='utf-8') as f:
            json.dump(data, f)

    @responses.activate
    def test_run_writes_snapshot(self):
        responses.add(responses.GET, FEED_URL, body=FEED_BODY, status=200)

        self.assertEqual(main(['--config-dir', self.config_dir]), 0)

        with open(self.output_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual([item['title'] for item in data['items']], ['Story'])
        self.assertEqual(data['items'][0]['source'], 'Retail Dive')

    @responses.activate
    def test_output_override(self):
        responses.add(responses.GET, FEED_URL, body=FEED_BODY, status=200)
        override = os.path.join(self.temp_dir, 'public', 'feed.json')

        self.assertEqual(main(['--config-dir', self.config_dir, '--output', override]), 0)
        self.assertTrue(os.path.exists(override))
        self.assertFalse(os.path.exists(self.output_path))

    @responses.activate
    def test_fail_on_empty_exit_code(self):
        responses.add(responses.GET, FEED_URL, status=500)

        self.assertEqual(main(['--config-dir', self.config_dir, '--fail-on-empty']), EXIT_EMPTY_SNAPSHOT)
        self.assertFalse(os.path.exists(self.output_path))

    @responses.activate
    def test_total_failure_without_flag_still_writes(self):
        responses.add(responses.GET, FEED_URL, status=500)

        self.assertEqual(main(['--config-dir', self.config_dir]), 0)
        with open(self.output_path, 'r', encoding='utf-8') as f:
            self.assertEqual(json.load(f)['items'], [])

    def test_missing_configuration(self):
        self.assertEqual(main(['--config-dir', os.path.join(self.temp_dir, 'nowhere')]), EXIT_CONFIG_ERROR)

    @patch('feed_aggregator.main.initialize_scheduler', return_value=None)
    def test_schedule_without_times(self, mock_initialize):
        self.assertEqual(main(['--config-dir', self.config_dir, '--schedule']), EXIT_CONFIG_ERROR)
        mock_initialize.assert_called_once()


if __name__ == '__main__':
    unittest.main()
