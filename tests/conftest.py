import configparser

import pytest


CODEX_INI = """\
version=1

[steamachievements]
count=2

[ACH_ONE]
Achieved=1
UnlockTime=1700000000

[ACH_TWO]
Achieved=0
"""


@pytest.fixture
def write_file(tmp_path):
    def _write(relative, content):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
        return path
    return _write


@pytest.fixture
def codex_ini(write_file):
    return write_file('CODEX/1245620/achievements.ini', CODEX_INI)


@pytest.fixture
def make_config(tmp_path):
    def _make(api_key='KEY', folders=None, max_notify=2):
        config = configparser.ConfigParser(interpolation=None)
        config['steam'] = {'api_key': api_key}
        config['watcher'] = {
            'folders': '\n'.join(str(f) for f in (folders or [])),
            'debounce_seconds': '0.01',
            'max_notify_achievements': str(max_notify),
        }
        config['paths'] = {
            'cache_dir': str(tmp_path / 'cache'),
            'state_file': str(tmp_path / 'state.json'),
            'log_dir': str(tmp_path / 'logs'),
        }
        return config
    return _make
