import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from filecompare.core.diff.text_diff import DiffAlgorithm
from filecompare.services.settings import (
    ApplicationSettings,
    CompareMode,
    SettingsManager,
)


class TestSettingsManager(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="filecompare_settings_")
        self.settings_path = Path(self.test_dir) / "nested" / "settings.json"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_missing_file_gives_defaults(self):
        settings = SettingsManager(self.settings_path).settings
        self.assertEqual(settings, ApplicationSettings())

    def test_save_and_load(self):
        settings = ApplicationSettings()
        settings.comparison.algorithm = DiffAlgorithm.PATIENCE
        settings.comparison.mode = CompareMode.BINARY
        settings.comparison.chunk_size = 512
        settings.logging.level = "DEBUG"

        self.assertTrue(SettingsManager(self.settings_path).save(settings))

        with open(self.settings_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual(data["comparison"]["algorithm"], "PATIENCE")

        loaded = SettingsManager(self.settings_path).load()
        self.assertEqual(loaded, settings)

    def test_unreadable_file_falls_back_to_defaults(self):
        os.makedirs(self.settings_path.parent)
        self.settings_path.write_text("{not json", encoding='utf-8')
        self.assertEqual(SettingsManager(self.settings_path).load(), ApplicationSettings())

    def test_unknown_enum_names_use_defaults(self):
        os.makedirs(self.settings_path.parent)
        self.settings_path.write_text(
            json.dumps({"comparison": {"algorithm": "QUANTUM", "encoding": "latin-1"}}),
            encoding='utf-8'
        )
        loaded = SettingsManager(self.settings_path).load()
        self.assertEqual(loaded.comparison.algorithm, DiffAlgorithm.MYERS)
        self.assertEqual(loaded.comparison.encoding, "latin-1")

    def test_wrongly_typed_values_use_defaults(self):
        os.makedirs(self.settings_path.parent)
        self.settings_path.write_text(
            json.dumps({
                "comparison": {
                    "encoding": None,
                    "chunk_size": "big",
                    "ignore_line_endings": "no",
                },
                "logging": {"level": 10, "log_file": None},
            }),
            encoding='utf-8'
        )
        loaded = SettingsManager(self.settings_path).load()
        self.assertEqual(loaded, ApplicationSettings())

    def test_boolean_is_not_a_chunk_size(self):
        os.makedirs(self.settings_path.parent)
        self.settings_path.write_text(
            json.dumps({"comparison": {"chunk_size": True}, "logging": []}),
            encoding='utf-8'
        )
        loaded = SettingsManager(self.settings_path).load()
        self.assertEqual(loaded.comparison.chunk_size, ApplicationSettings().comparison.chunk_size)
        self.assertEqual(loaded.logging, ApplicationSettings().logging)

    def test_options_conversion(self):
        settings = ApplicationSettings()
        settings.comparison.ignore_line_endings = False
        settings.comparison.chunk_size = 64
        self.assertFalse(settings.comparison.to_text_options().ignore_line_endings)
        self.assertEqual(settings.comparison.to_binary_options().chunk_size, 64)

    def test_mode_from_string(self):
        self.assertEqual(CompareMode.from_string("Binary"), CompareMode.BINARY)
        self.assertEqual(CompareMode.from_string("nonsense"), CompareMode.AUTO)


if __name__ == "__main__":
    unittest.main()
