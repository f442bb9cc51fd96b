# steam_cache.py
import json
import threading
import time
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path

from logging_utils import get_logger
from path_utils import ensure_directory, is_older_than_days

_cache_logger = get_logger('steam_cache')

API_URL = 'https://api.steampowered.com/IPlayerService/GetGameAchievements/v1/'
ICON_URL = 'https://steamcdn-a.akamaihd.net/steamcommunity/public/images/apps/{appid}/{icon}'

CACHE_MAX_AGE_DAYS = 90     # 実績メタデータ: 約3か月
IMAGE_MAX_AGE_DAYS = 180    # アイコン画像: 約6か月
REQUEST_TIMEOUT = 10


class SteamCacheError(Exception):
    pass


@dataclass
class SteamAchievement:
    api_name: str
    display_name: str = ''
    description: str = ''
    icon: str = ''
    icon_gray: str = ''
    hidden: bool = False
    rarity: str = ''

    @classmethod
    def from_api(cls, data):
        """Builds an achievement from a Steam Web API entry."""
        return cls(
            api_name=data.get('internal_name', ''),
            display_name=data.get('localized_name', ''),
            description=data.get('localized_desc', ''),
            icon=data.get('icon', ''),
            icon_gray=data.get('icon_gray', ''),
            hidden=bool(data.get('hidden', False)),
            rarity=str(data.get('player_percent_unlocked', '')),
        )


class SteamCache:
    """Keeps Steam achievement metadata and icons on disk, one directory per app id."""

    def __init__(self, cache_dir, api_key, cooldown_seconds=5):
        self.cache_dir = Path(cache_dir)
        self.api_key = api_key
        self.cooldown_seconds = cooldown_seconds
        self.logger = _cache_logger
        self._recent_operations = {}
        self._lock = threading.Lock()

    def cache_file(self, app_id):
        return self.cache_dir / app_id / 'achievements.json'

    def _in_cooldown(self, app_id):
        """Records the operation and reports whether one ran for app_id just before."""
        now = time.monotonic()
        with self._lock:
            last = self._recent_operations.get(app_id)
            if last is not None and (now - last) < self.cooldown_seconds:
                return True
            self._recent_operations[app_id] = now
        return False

    def _fetch(self, url):
        with urllib.request.urlopen(url, timeout=REQUEST_TIMEOUT) as response:
            if response.status != 200:
                raise SteamCacheError(f"failed to fetch {url}: HTTP {response.status}")
            return response.read()

    def cache_achievements(self, app_id):
        """Downloads and stores the achievement schema of app_id unless a recent copy exists."""
        if not self.api_key or not app_id:
            raise SteamCacheError("API key or App ID is empty")

        if self._in_cooldown(app_id):
            return False

        cache_path = self.cache_file(app_id)
        if cache_path.exists() and not is_older_than_days(cache_path, CACHE_MAX_AGE_DAYS):
            self.logger.info(f"Cache file is recent, skipping fetch for appId: {app_id}")
            return False

        self.logger.info(f"Caching achievements for appId: {app_id}")
        query = urllib.parse.urlencode({'language': 'english', 'key': self.api_key, 'appid': app_id})
        payload = json.loads(self._fetch(f"{API_URL}?{query}"))

        achievements = payload.get('response', {}).get('achievements', [])
        for entry in achievements:
            for key in ('icon', 'icon_gray'):
                if entry.get(key):
                    entry[key] = ICON_URL.format(appid=app_id, icon=entry[key])

        ensure_directory(cache_path.parent)
        with open(cache_path, 'w', encoding='utf-8') as f:
            json.dump({'appid': app_id, 'achievements': achievements}, f)
        return True

    def get_achievement(self, app_id, name):
        """Looks up one achievement by its API name, caching the schema first if needed."""
        cache_path = self.cache_file(app_id)
        if not cache_path.exists():
            self.cache_achievements(app_id)

        try:
            with open(cache_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SteamCacheError(f"could not read cache for appId {app_id}: {e}") from e

        for entry in data.get('achievements', []):
            if entry.get('internal_name') == name:
                return SteamAchievement.from_api(entry)

        raise SteamCacheError("achievement not found")

    def get_image(self, app_id, image_url):
        """Returns a local copy of image_url, downloading it when missing or stale."""
        image_dir = self.cache_dir / app_id / 'images'
        ensure_directory(image_dir)
        image_path = image_dir / Path(urllib.parse.urlparse(image_url).path).name

        if image_path.exists() and not is_older_than_days(image_path, IMAGE_MAX_AGE_DAYS):
            return image_path

        content = self._fetch(image_url)
        with open(image_path, 'wb') as f:
            f.write(content)
        return image_path
