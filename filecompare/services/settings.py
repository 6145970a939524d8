"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from filecompare.core.diff.binary_diff import DEFAULT_CHUNK_SIZE, BinaryCompareOptions
from filecompare.core.diff.text_diff import DiffAlgorithm, TextCompareOptions


class CompareMode(Enum):
    """How the CLI picks a comparison mode."""
    AUTO = "auto"
    TEXT = "text"
    BINARY = "binary"

    @classmethod
    def from_string(cls, value: str) -> CompareMode:
        """Create from string value."""
        try:
            for mode in cls:
                if mode.value == value.lower():
                    return mode
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.AUTO


@dataclass
class ComparisonSettings:
    """Settings for content comparison."""
    encoding: str = 'utf-8'
    mode: CompareMode = CompareMode.AUTO
    algorithm: DiffAlgorithm = DiffAlgorithm.MYERS
    ignore_line_endings: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def to_text_options(self) -> TextCompareOptions:
        return TextCompareOptions(
            algorithm=self.algorithm,
            ignore_line_endings=self.ignore_line_endings,
        )

    def to_binary_options(self) -> BinaryCompareOptions:
        return BinaryCompareOptions(chunk_size=self.chunk_size)


@dataclass
class LoggingSettings:
    """Logging settings."""
    level: str = "WARNING"
    log_file: str = ""


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    comparison: ComparisonSettings = field(default_factory=ComparisonSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'FileCompare' / 'settings.json'
        else:
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'filecompare' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Ignoring unreadable settings {self.settings_path}: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)

            self._settings = settings
            return True
        except OSError as e:
            logging.error(f"SettingsManager - Failed to save settings to {self.settings_path}: {e}")
            return False

    def reset(self) -> ApplicationSettings:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            else:
                return obj

        return convert(asdict(settings))

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def get_enum(enum_class: type, value: Any, default: Enum) -> Enum:
            if isinstance(value, str):
                try:
                    return enum_class[value]
                except KeyError:
                    return default
            return default

        def get_value(section: dict, key: str, expected: type, default: Any) -> Any:
            value = section.get(key, default)
            # bool is an int subclass; don't let true stand in for a number
            if isinstance(value, bool) and expected is not bool:
                return default
            return value if isinstance(value, expected) else default

        def get_section(key: str) -> dict:
            section = data.get(key, {})
            return section if isinstance(section, dict) else {}

        defaults = ComparisonSettings()
        comparison_data = get_section('comparison')
        comparison = ComparisonSettings(
            encoding=get_value(comparison_data, 'encoding', str, defaults.encoding),
            mode=get_enum(CompareMode, comparison_data.get('mode'), defaults.mode),
            algorithm=get_enum(DiffAlgorithm, comparison_data.get('algorithm'), defaults.algorithm),
            ignore_line_endings=get_value(
                comparison_data, 'ignore_line_endings', bool, defaults.ignore_line_endings
            ),
            chunk_size=get_value(comparison_data, 'chunk_size', int, defaults.chunk_size),
        )

        log_defaults = LoggingSettings()
        logging_data = get_section('logging')
        log_settings = LoggingSettings(
            level=get_value(logging_data, 'level', str, log_defaults.level),
            log_file=get_value(logging_data, 'log_file', str, log_defaults.log_file),
        )

        return ApplicationSettings(comparison=comparison, logging=log_settings)
