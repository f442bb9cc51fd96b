# state_store.py
import json
import threading
from pathlib import Path
# 依存関係: logging_utilsからロガーを取得
from logging_utils import get_logger


class StateStore:
    """Remembers the last seen unlock state of every achievement, per app id."""
    def __init__(self, state_file='achievement_state.json'):
        self.state_file = Path(state_file)
        self.app_info = {}
        self.logger = get_logger('state_store')
        self._lock = threading.Lock()
        self._load_state()

    def _load_state(self):
        """Loads state from file if it exists."""
        if self.state_file.exists():
            try:
                with open(self.state_file, 'r', encoding='utf-8') as f:
                    self.app_info = json.load(f)
                self.logger.info(f"Loaded state with {len(self.app_info)} apps.")
            except Exception as e:
                self.logger.error(f"Failed to load state file: {e}")
                self.app_info = {}

    def _save_state(self):
        """Saves current state to file."""
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, 'w', encoding='utf-8') as f:
                json.dump(self.app_info, f, indent=4)
        except Exception as e:
            self.logger.error(f"Failed to save state file: {e}")

    def get_app(self, app_id):
        """Returns {name: achieved} for the app, or an empty dict."""
        with self._lock:
            return dict(self.app_info.get(app_id, {}))

    def set_app(self, app_id, achievements):
        """Replaces the stored state of an app with the given achievements."""
        with self._lock:
            self.app_info[app_id] = {
                name: bool(achievement.achieved) for name, achievement in achievements.items()
            }
            self._save_state()

    def diff_new_unlocks(self, app_id, achievements):
        """
        Returns the achievements that are unknown for the app or that went
        from locked to unlocked since the stored state.
        """
        old = self.get_app(app_id)
        new_unlocks = []
        for name, achievement in achievements.items():
            if name not in old or (not old[name] and achievement.achieved):
                new_unlocks.append(achievement)
        return new_unlocks
