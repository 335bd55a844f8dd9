import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from termplex.config.paths import TermplexPaths
from termplex.config.settings import load_settings
from termplex.core.priority import MAIN_LEVEL


class SettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._home = tempfile.TemporaryDirectory()
        self._root = tempfile.TemporaryDirectory()
        env = {key: value for key, value in os.environ.items() if not key.startswith("TERMPLEX_")}
        env["HOME"] = self._home.name
        patcher = mock.patch.dict(os.environ, env, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._home.cleanup)
        self.addCleanup(self._root.cleanup)
        self.paths = TermplexPaths(Path(self._root.name))
        self.output = io.StringIO()
        self.console = Console(file=self.output, force_terminal=False, color_system=None)

    def _write(self, path: Path, data: object) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")

    def test_defaults_without_files(self) -> None:
        settings = load_settings(self.paths, self.console)
        self.assertEqual(settings.main_level, MAIN_LEVEL)
        self.assertTrue(settings.progress)
        self.assertIsNone(settings.debug)

    def test_workspace_overrides_global_and_env_overrides_both(self) -> None:
        self._write(self.paths.global_config_file, {"main_level": 50, "debug": "error"})
        self._write(self.paths.config_file, {"main_level": 70, "unknown": True})
        settings = load_settings(self.paths, self.console)
        self.assertEqual(settings.main_level, 70)
        self.assertEqual(settings.debug, "error")

        with mock.patch.dict(
            os.environ, {"TERMPLEX_MAIN_LEVEL": "90", "TERMPLEX_NO_PROGRESS": "1"}
        ):
            settings = load_settings(self.paths, self.console)
        self.assertEqual(settings.main_level, 90)
        self.assertFalse(settings.progress)

    def test_invalid_files_and_levels_are_reported(self) -> None:
        self.paths.config_file.parent.mkdir(parents=True)
        self.paths.config_file.write_text("{not json", encoding="utf-8")
        self._write(self.paths.global_config_file, {"main_level": -3})
        settings = load_settings(self.paths, self.console)
        self.assertEqual(settings.main_level, MAIN_LEVEL)
        self.assertIn("Ignoring", self.output.getvalue())
        self.assertIn("Invalid main_level", self.output.getvalue())


if __name__ == "__main__":
    unittest.main()
