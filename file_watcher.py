# file_watcher.py
import threading
from pathlib import Path
from watchdog.events import FileSystemEventHandler

# --- 依存関係の明示的なインポート ---
from logging_utils import get_logger
from achievement_parser import parse_achievements, AchievementParseError
from config_utils import get_api_key, get_folders, get_float, get_int
from notification_service import send_achievement
from path_utils import extract_app_id, find_files_recursive, is_achievement_file
from steam_cache import SteamCacheError
# StateStore と SteamCache は外部から注入される（DI）

_watcher_logger = get_logger('file_watcher')


class AchievementProcessor:
    """Parses achievement files and notifies about newly unlocked achievements."""

    def __init__(self, config, state_store, steam_cache, throttle_instance=None):
        self.config = config
        self.state_store = state_store
        self.steam_cache = steam_cache
        self.throttle_instance = throttle_instance
        self.api_key = get_api_key(config)
        self.max_notify = get_int(config, 'watcher', 'max_notify_achievements', 2)
        self.logger = _watcher_logger

    def warm_cache(self, app_id):
        if not self.api_key:
            return
        try:
            self.steam_cache.cache_achievements(app_id)
        except (SteamCacheError, OSError, ValueError) as e:
            self.logger.error(f"Error caching achievements for appId {app_id}: {e}")

    def seed_file(self, path):
        """Records the current state of a file without notifying. Used at startup."""
        app_id = extract_app_id(path)
        if not app_id:
            return None
        try:
            achievements = parse_achievements(path)
        except AchievementParseError as e:
            self.logger.error(f"Error parsing file {path}: {e}")
            return None

        self.state_store.set_app(app_id, achievements)
        if achievements:
            self.logger.info(f"Loaded {len(achievements)} achievements for appId: {app_id}")
        return app_id

    def process_file(self, path, created=False):
        """
        Handles a created or modified achievement file.
        Returns the list of achievements that triggered a notification.
        """
        path = Path(path)
        if not self.api_key:
            self.logger.warning("No API Key set, cannot fetch achievement info")
            return []

        app_id = extract_app_id(path)
        if not app_id:
            self.logger.warning(f"Could not extract appId from path: {path}")
            return []

        if created:
            self.warm_cache(app_id)

        try:
            achievements = parse_achievements(path)
        except AchievementParseError as e:
            self.logger.error(f"Error parsing file {path}: {e}")
            return []

        new_unlocks = self.state_store.diff_new_unlocks(app_id, achievements)
        if not new_unlocks:
            return []

        self.state_store.set_app(app_id, achievements)
        if len(new_unlocks) > self.max_notify:
            # 一括インポートとみなし通知しない
            self.logger.info(
                f"{len(new_unlocks)} new achievements for appId {app_id}; "
                f"above the limit of {self.max_notify}, state stored without notifying."
            )
            return []

        self.logger.info(f"New achievements for appId: {app_id}")
        for achievement in new_unlocks:
            self._notify(app_id, achievement.name)
        return new_unlocks

    def _notify(self, app_id, name):
        self.logger.info(f"  New Achievement: {name}")
        try:
            info = self.steam_cache.get_achievement(app_id, name)
        except (SteamCacheError, OSError, ValueError) as e:
            self.logger.error(f"Error fetching achievement info: {e}")
            return

        icon = ''
        if info.icon:
            try:
                icon = str(self.steam_cache.get_image(app_id, info.icon))
            except (SteamCacheError, OSError) as e:
                self.logger.error(f"Error fetching achievement icon: {e}")

        send_achievement(info.display_name, info.description, icon,
                         throttle_instance=self.throttle_instance)


def process_existing_achievement_files(config, processor):
    """Seeds the state store from the achievement files found at startup."""
    _watcher_logger.info("Checking for existing achievement files...")
    found = 0

    for folder in get_folders(config):
        if not folder.exists():
            _watcher_logger.info(f"Folder does not exist, skipping: {folder}")
            continue

        for path in find_files_recursive(folder):
            app_id = processor.seed_file(path)
            if app_id:
                found += 1
                processor.warm_cache(app_id)

    return found


class AchievementFileHandler(FileSystemEventHandler):
    """Handles file system events for achievement files, debounced per path."""
    def __init__(self, processor, debounce_seconds=0.1):
        self.processor = processor
        self.debounce_seconds = debounce_seconds
        self.logger = _watcher_logger
        self._timers = {}
        # 作成イベントは後続の変更イベントでも保持する
        self._created = set()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config, processor):
        return cls(processor, get_float(config, 'watcher', 'debounce_seconds', 0.1))

    def _schedule(self, path, created):
        with self._lock:
            if created:
                self._created.add(path)
            timer = self._timers.pop(path, None)
            if timer is not None:
                timer.cancel()
            timer = threading.Timer(self.debounce_seconds, self._fire, args=(path,))
            timer.daemon = True
            self._timers[path] = timer
        timer.start()

    def _fire(self, path):
        with self._lock:
            self._timers.pop(path, None)
            created = path in self._created
            self._created.discard(path)

        if not Path(path).is_file():
            return
        try:
            self.processor.process_file(path, created=created)
        except Exception as e:
            self.logger.error(f"Error processing achievement file {path}: {e}")

    def _cancel(self, path):
        with self._lock:
            timer = self._timers.pop(path, None)
            self._created.discard(path)
        if timer is not None:
            timer.cancel()

    def on_created(self, event):
        """Called when a file or directory is created."""
        if not event.is_directory and is_achievement_file(event.src_path):
            self.logger.info(f"File event: Created {event.src_path}")
            self._schedule(str(event.src_path), created=True)

    def on_modified(self, event):
        if not event.is_directory and is_achievement_file(event.src_path):
            self.logger.debug(f"File event: Modified {event.src_path}")
            self._schedule(str(event.src_path), created=False)

    def on_deleted(self, event):
        if not event.is_directory:
            self._cancel(str(event.src_path))

    def on_moved(self, event):
        if event.is_directory:
            return
        self._cancel(str(event.src_path))
        # 一時ファイルからのリネームで保存するエミュレータ向け
        if is_achievement_file(event.dest_path):
            self._schedule(str(event.dest_path), created=True)

    def cancel_all(self):
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
            self._created.clear()
        for timer in timers:
            timer.cancel()
