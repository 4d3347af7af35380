import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dmbot import main as dmbot_main

_ENV_KEYS = ["DMBOT_TOKEN", "DMBOT_PREFIX", "DMBOT_DB_PATH", "DMBOT_FFMPEG", "LOG_LEVEL"]


class MainTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self._env = patch.dict(os.environ, {}, clear=False)
        self._env.start()
        for key in _ENV_KEYS:
            os.environ.pop(key, None)
        self._dotenv = patch("dmbot.config.dotenv.load_dotenv")
        self._dotenv.start()
        self._bot = patch("dmbot.main.DMBot")
        self.bot_class = self._bot.start()

    def tearDown(self) -> None:
        self._bot.stop()
        self._dotenv.stop()
        self._env.stop()
        self._tmp.cleanup()

    def test_missing_token_exits_before_building_the_client(self) -> None:
        with self.assertLogs("dmbot.main", level="CRITICAL") as logs:
            with self.assertRaises(SystemExit) as ctx:
                dmbot_main.main()

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("DMBOT_TOKEN", logs.output[0])
        self.bot_class.assert_not_called()

    def test_unknown_log_level_still_runs_the_client(self) -> None:
        os.environ.update(
            {
                "DMBOT_TOKEN": "secret",
                "LOG_LEVEL": "verbose",
                "DMBOT_DB_PATH": os.path.join(self._tmp.name, "dmbot.db"),
            }
        )

        with patch("dmbot.main.SongRegistry") as registry_class:
            dmbot_main.main()

        settings, registry = self.bot_class.call_args.args
        self.assertEqual(settings.log_level, "INFO")
        self.assertIs(registry, registry_class.return_value)
        self.bot_class.return_value.run.assert_called_once_with("secret", log_handler=None)


if __name__ == "__main__":
    unittest.main()
