"""File-based history storage implementation."""

import json
import logging
import os

from core.config import HISTORY_KEY
from core.interfaces import HistoryStore
from core.models import AttemptRecord

logger = logging.getLogger(__name__)


class FileHistoryStore(HistoryStore):
    """Attempt log kept as a JSON array in one file named after the history key.

    The file is re-read on every access since another process may have
    appended to or cleared it in the meantime.
    """

    def __init__(self, state_dir: str = None, config_file: str = None, key: str = HISTORY_KEY):
        self.config_file = config_file or os.path.expanduser('~/.config/alefbet/config.json')
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or project_root
        self.key = key

    @property
    def history_file(self) -> str:
        return os.path.join(self.state_dir, f'{self.key}.json')

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(f"Config file not found at {self.config_file}")
        with open(self.config_file, 'r', encoding='utf-8') as f:
            return json.load(f)

    def read_all(self) -> list[AttemptRecord]:
        if not os.path.exists(self.history_file):
            return []
        try:
            with open(self.history_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            logger.error(f"Error reading history from {self.history_file}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"History in {self.history_file} is not a list, ignoring it")
            return []
        try:
            return [AttemptRecord.from_dict(entry) for entry in data]
        except ValueError as e:
            logger.error(f"Malformed history in {self.history_file}, ignoring it: {e}")
            return []

    def append(self, record: AttemptRecord) -> bool:
        if not isinstance(record, AttemptRecord):
            logger.warning(f"Attempted to save invalid record: {record!r}")
            return False
        errors = record.validation_errors()
        if errors:
            logger.warning(f"Attempted to save invalid record ({'; '.join(errors)}): {record!r}")
            return False

        history = self.read_all()
        history.append(record)
        try:
            os.makedirs(self.state_dir, exist_ok=True)
            with open(self.history_file, 'w', encoding='utf-8') as f:
                json.dump([r.to_dict() for r in history], f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Error writing history to {self.history_file}: {e}")
            return False
        return True

    def clear(self) -> None:
        try:
            if os.path.exists(self.history_file):
                os.remove(self.history_file)
            logger.info("Selection history cleared")
        except OSError as e:
            logger.error(f"Error clearing history at {self.history_file}: {e}")
