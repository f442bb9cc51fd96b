# achievement_parser.py
import configparser
import re
from dataclasses import dataclass
from enum import Enum

# 実績ではなくコンテナを表すセクション名
RESERVED_SECTION = 'steamachievements'

# 解除状態を表すキー (ファイル内で最後に現れたものを採用)
ACHIEVED_KEYS = ('achieved', 'state', 'haveachieved', 'unlocked', 'earned')

_BOOLEAN_STATES = {
    '1': True, 't': True, 'T': True, 'true': True, 'TRUE': True, 'True': True,
    '0': False, 'f': False, 'F': False, 'false': False, 'FALSE': False, 'False': False,
}

_COMMENT_PREFIXES = ('#', ';')

# 改行を含むためヘッダ行からは生成されない名前
_GLOBAL_SECTION = '\n'


class AchievementParseError(Exception):
    """Base class for all errors raised while reading an achievements file."""


class UnsupportedFormatError(AchievementParseError):
    def __init__(self):
        super().__init__("Unsupported file format")


class FormatNotImplementedError(AchievementParseError):
    def __init__(self, format_name='JSON'):
        super().__init__(f"{format_name} parsing not implemented yet")


class LoadFailureError(AchievementParseError):
    def __init__(self, detail):
        self.detail = str(detail)
        super().__init__(f"Failed to load INI file: {self.detail}")


class FileFormat(Enum):
    INI = 'ini'
    JSON = 'json'
    UNSUPPORTED = None

    @classmethod
    def from_path(cls, path):
        """
        Detects the format from the text after the last '.' of the path.
        A path without any '.' uses the whole path as the token.
        """
        token = str(path).rsplit('.', 1)[-1]
        for file_format in (cls.INI, cls.JSON):
            if token == file_format.value:
                return file_format
        return cls.UNSUPPORTED


@dataclass
class Achievement:
    name: str
    achieved: bool = False


class AchievementIniParser(configparser.ConfigParser):
    """
    ConfigParser variant for emulator achievement files.

    Headers may be empty ("[]") and their names are trimmed. DEFAULT is an
    ordinary section name; the global section uses a name no header yields.
    """
    SECTCRE = re.compile(r"\[\s*(?P<header>(?:.*\S)?)\s*\]")

    def __init__(self):
        super().__init__(
            interpolation=None,
            strict=False,
            comment_prefixes=_COMMENT_PREFIXES,
            inline_comment_prefixes=_COMMENT_PREFIXES,
            default_section=_GLOBAL_SECTION,
        )

    def optionxform(self, optionstr):
        # 大文字小文字を区別してキーを保持
        return optionstr

    def _blank_global_lines(self, lines):
        """
        Blanks the valid key=value lines before the first section, keeping the
        line numbers of later errors. Invalid lines are left for read_file to
        report as a missing section header.
        """
        for index, line in enumerate(lines):
            if self.SECTCRE.match(line):
                break
            if not line or line.startswith(_COMMENT_PREFIXES) or self.OPTCRE.match(line):
                lines[index] = ''
        return lines

    def read_achievement_text(self, text, source):
        # 前後の空白を除去 (インデントされたヘッダを継続行として扱わない)
        lines = [line.strip() for line in text.splitlines()]
        self.read_file(self._blank_global_lines(lines), source=source)


def _load_ini(path):
    """Reads the file once and returns a parser holding its sections."""
    config = AchievementIniParser()
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            text = f.read()
        config.read_achievement_text(text, str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        raise LoadFailureError(e) from e
    return config


def _section_names(config):
    return [
        name for name in config.sections()
        if name and name != RESERVED_SECTION
    ]


def parse_ini(path):
    """
    Returns the achievement section names of an INI file in file order.

    The default section and RESERVED_SECTION are skipped. Raises
    LoadFailureError when the file cannot be read or parsed.
    """
    return _section_names(_load_ini(path))


def _parse_achieved(section_name, section):
    """Every state key is validated; the last one in the section wins."""
    achieved = False
    for key, value in section.items():
        lowered = key.lower()
        if lowered not in ACHIEVED_KEYS:
            continue
        state = _BOOLEAN_STATES.get(value.strip())
        if state is None:
            raise LoadFailureError(
                f"invalid boolean value for '{lowered}' in section {section_name}: '{value}'"
            )
        achieved = state
    return achieved


def parse_ini_achievements(path):
    """Returns {name: Achievement} for every achievement section of an INI file."""
    config = _load_ini(path)
    achievements = {}
    for name in _section_names(config):
        achievements[name] = Achievement(name, _parse_achieved(name, config[name]))
    return achievements


def _dispatch(path, ini_reader):
    file_format = FileFormat.from_path(path)
    if file_format is FileFormat.INI:
        return ini_reader(path)
    if file_format is FileFormat.JSON:
        raise FormatNotImplementedError('JSON')
    raise UnsupportedFormatError()


def parse_file(path):
    """Parses an achievements file and returns its achievement names."""
    return _dispatch(path, parse_ini)


def parse_achievements(path):
    """Parses an achievements file and returns its achievements with unlock state."""
    return _dispatch(path, parse_ini_achievements)
