"""Tests for the file history store and the REST API."""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

import server.app as server_app
from core.models import AttemptRecord
from server.file_storage import FileHistoryStore


def make_record(symbol: str = 'ב', answer: str = 'בית', is_correct: bool = True, round_id: int = 1000) -> AttemptRecord:
    return AttemptRecord(
        timestamp=round_id + 500,
        round_id=round_id,
        target_symbol=symbol,
        selected_answer=answer,
        is_correct=is_correct,
        exercise_kind='letter-to-picture',
        target_word='בית'
    )


# ============================================================================
# File history store
# ============================================================================

class TestFileHistoryStore(unittest.TestCase):
    """Tests for the JSON file history store."""

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.state_dir = tmp.name
        self.store = FileHistoryStore(state_dir=self.state_dir,
                                      config_file=os.path.join(self.state_dir, 'config.json'))

    def write_history(self, content: str):
        with open(self.store.history_file, 'w', encoding='utf-8') as f:
            f.write(content)

    def test_history_file_named_after_key(self):
        self.assertEqual(self.store.history_file, os.path.join(self.state_dir, 'alefbet_history.json'))

    def test_missing_file_is_empty(self):
        self.assertEqual(self.store.read_all(), [])

    def test_append_and_read_in_order(self):
        first = make_record(round_id=1000)
        second = make_record(answer='בננה', is_correct=False, round_id=2000)
        self.assertTrue(self.store.append(first))
        self.assertTrue(self.store.append(second))
        self.assertEqual(self.store.read_all(), [first, second])

    def test_hebrew_is_stored_unescaped(self):
        self.store.append(make_record())
        with open(self.store.history_file, encoding='utf-8') as f:
            self.assertIn('בית', f.read())

    def test_invalid_record_rejected(self):
        with self.assertLogs('server.file_storage', level='WARNING'):
            self.assertFalse(self.store.append(make_record(round_id=0)))
        self.assertFalse(os.path.exists(self.store.history_file))

    def test_non_record_rejected(self):
        self.assertFalse(self.store.append({'round_id': 5}))

    def test_corrupt_json_reads_empty(self):
        self.write_history('{not json')
        with self.assertLogs('server.file_storage', level='ERROR'):
            self.assertEqual(self.store.read_all(), [])

    def test_invalid_utf8_reads_empty(self):
        with open(self.store.history_file, 'wb') as f:
            f.write(b'[\xff\xfe garbage')
        with self.assertLogs('server.file_storage', level='ERROR'):
            self.assertEqual(self.store.read_all(), [])
        self.assertTrue(self.store.append(make_record()))
        self.assertEqual(len(self.store.read_all()), 1)

    def test_non_list_reads_empty(self):
        self.write_history(json.dumps({'timestamp': 1}))
        self.assertEqual(self.store.read_all(), [])

    def test_malformed_entry_reads_empty(self):
        good = make_record().to_dict()
        self.write_history(json.dumps([good, {'timestamp': 5}], ensure_ascii=False))
        self.assertEqual(self.store.read_all(), [])

    def test_append_after_corruption_starts_fresh(self):
        self.write_history('garbage')
        self.assertTrue(self.store.append(make_record()))
        self.assertEqual(len(self.store.read_all()), 1)

    def test_clear(self):
        self.store.append(make_record())
        self.store.clear()
        self.assertEqual(self.store.read_all(), [])
        self.store.clear()

    def test_external_clear_is_seen(self):
        self.store.append(make_record())
        os.remove(self.store.history_file)
        self.assertEqual(self.store.read_all(), [])

    def test_load_config(self):
        with open(self.store.config_file, 'w', encoding='utf-8') as f:
            json.dump({'advance_delay_seconds': 3}, f)
        self.assertEqual(self.store.load_config(), {'advance_delay_seconds': 3})

    def test_load_config_missing(self):
        with self.assertRaises(FileNotFoundError):
            self.store.load_config()


# ============================================================================
# REST API
# ============================================================================

class TestAPI(unittest.TestCase):
    """Tests for the FastAPI endpoints."""

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        root = Path(tmp.name)
        images_dir = root / 'images'
        images_dir.mkdir()
        for name in ('אבא.png', 'בית.png', 'notes.txt'):
            (images_dir / name).write_bytes(b'')

        config_file = root / 'config.json'
        weights = {'letter-to-picture': 1, 'picture-to-letter': 0, 'picture-to-word': 0,
                   'word-scramble': 0, 'drawing': 0}
        config_file.write_text(json.dumps({'exercise_weights': weights}), encoding='utf-8')

        env = patch.dict(os.environ, {'ALEFBET_STATE_DIR': str(root), 'ALEFBET_CONFIG': str(config_file)})
        env.start()
        self.addCleanup(env.stop)
        images = patch.object(server_app, 'IMAGES_DIR', images_dir)
        images.start()
        self.addCleanup(images.stop)

        self.history_file = root / 'alefbet_history.json'
        self.client = TestClient(server_app.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def current_round(self) -> dict:
        return self.client.get('/api/state').json()['round']

    def test_health(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['service'], 'alefbet')

    def test_initial_state(self):
        state = self.client.get('/api/state').json()
        self.assertTrue(state['ready'])
        self.assertIsNone(state['error'])
        self.assertEqual(state['score'], 0)
        self.assertEqual(state['round']['exercise_kind'], 'letter-to-picture')
        self.assertEqual(len(state['round']['image_options']), 2)

    def test_correct_image_answer(self):
        correct = self.current_round()['correct_item']
        response = self.client.post('/api/answer/image', json={'word': correct['word']})
        self.assertEqual(response.status_code, 200)
        state = response.json()
        self.assertTrue(state['last_outcome'])
        self.assertEqual(state['score'], 1)
        self.assertEqual(state['selected_answer']['word'], correct['word'])
        self.assertEqual(state['stats_version'], 1)

        history = json.loads(self.history_file.read_text(encoding='utf-8'))
        self.assertEqual(len(history), 1)
        self.assertTrue(history[0]['is_correct'])

    def test_unknown_image_rejected(self):
        response = self.client.post('/api/answer/image', json={'word': 'גמל'})
        self.assertEqual(response.status_code, 400)

    def test_symbol_not_an_option(self):
        response = self.client.post('/api/answer/symbol', json={'symbol': 'א'})
        self.assertEqual(response.status_code, 400)

    def test_word_not_an_option(self):
        response = self.client.post('/api/answer/word', json={'word': 'אבא'})
        self.assertEqual(response.status_code, 400)

    def test_bad_move_area(self):
        response = self.client.post('/api/scramble/move', json={
            'from_area': 'bank', 'from_index': 0, 'to_area': 'canvas', 'to_index': 0
        })
        self.assertEqual(response.status_code, 400)

    def test_drawing_ignored_outside_drawing_round(self):
        state = self.client.post('/api/drawing', json={'passed': True}).json()
        self.assertIsNone(state['last_outcome'])
        self.assertEqual(state['score'], 0)

    def test_new_round(self):
        first = self.current_round()
        state = self.client.post('/api/round').json()
        self.assertGreater(state['round']['round_id'], first['round_id'])

    def test_toggle_recording(self):
        self.assertTrue(self.client.post('/api/recording/toggle').json()['recording_paused'])
        correct = self.current_round()['correct_item']
        self.client.post('/api/answer/image', json={'word': correct['word'], 'symbol': correct['symbol']})
        self.assertFalse(self.history_file.exists())
        self.assertFalse(self.client.post('/api/recording/toggle').json()['recording_paused'])

    def test_stats_and_clear(self):
        correct = self.current_round()['correct_item']
        self.client.post('/api/answer/image', json={'word': correct['word']})

        stats = self.client.get('/api/stats').json()
        self.assertEqual([row['symbol'] for row in stats['rows']], ['א', 'ב'])
        self.assertEqual(stats['total_records'], 1)
        self.assertFalse(stats['recording_paused'])

        self.assertEqual(self.client.delete('/api/history').json(), {'success': True})
        self.assertEqual(self.client.get('/api/stats').json()['total_records'], 0)


class TestAPIWithoutGame(unittest.TestCase):

    def test_uninitialized_returns_503(self):
        with patch.object(server_app, 'game', None):
            client = TestClient(server_app.app)
            self.assertEqual(client.get('/api/state').status_code, 503)
            self.assertEqual(client.get('/api/stats').status_code, 503)


class TestAPIEmptyCatalog(unittest.TestCase):

    def test_error_state_reported(self):
        with tempfile.TemporaryDirectory() as tmp:
            env = {'ALEFBET_STATE_DIR': tmp, 'ALEFBET_CONFIG': os.path.join(tmp, 'missing.json')}
            with patch.dict(os.environ, env), \
                    patch.object(server_app, 'IMAGES_DIR', Path(tmp) / 'no-images'), \
                    TestClient(server_app.app) as client:
                state = client.get('/api/state').json()
        self.assertIsNotNone(state['error'])
        self.assertIsNone(state['round'])
        self.assertFalse(state['ready'])


if __name__ == '__main__':
    unittest.main()
