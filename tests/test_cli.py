import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from typer.testing import CliRunner

from textquest.cli import app
from textquest.core.audit import append_audit
from textquest.core.config import DEFAULT_WORLD_PATH, get_config, load_config, resolve_config_path
from textquest.core.errors import ConfigError


WORLD_PATH = Path(__file__).resolve().parent.parent / "textquest" / "world" / "world.json"


class TempDirTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name).resolve()
        self._cwd = os.getcwd()
        os.chdir(self.tmp)
        self._env = mock.patch.dict(os.environ)
        self._env.start()
        os.environ.pop("TEXTQUEST_CONFIG", None)

    def tearDown(self):
        self._env.stop()
        os.chdir(self._cwd)
        self._tmp.cleanup()


class ConfigTests(TempDirTestCase):
    def test_defaults_without_config(self):
        self.assertIsNone(resolve_config_path(None))
        cfg = get_config()
        self.assertEqual(cfg.world_path, str(DEFAULT_WORLD_PATH))
        self.assertTrue(cfg.clear_screen)
        self.assertFalse(cfg.audit_enabled)

    def test_paths_relative_to_config(self):
        conf_dir = self.tmp / "conf"
        conf_dir.mkdir()
        (conf_dir / "textquest.yaml").write_text(
            "world:\n  path: worlds/castle.json\n"
            "display:\n  clear_screen: false\n"
            "audit:\n  enabled: true\n  path: logs/audit.jsonl\n",
            encoding="utf-8",
        )
        cfg = load_config(conf_dir / "textquest.yaml")
        self.assertEqual(cfg.world_path, str(conf_dir / "worlds" / "castle.json"))
        self.assertEqual(cfg.audit_path, str(conf_dir / "logs" / "audit.jsonl"))
        self.assertFalse(cfg.clear_screen)
        self.assertTrue(cfg.audit_enabled)

    def test_found_by_walking_up(self):
        (self.tmp / "textquest.yaml").write_text("display:\n  clear_screen: false\n", encoding="utf-8")
        nested = self.tmp / "a" / "b"
        nested.mkdir(parents=True)
        os.chdir(nested)
        self.assertEqual(resolve_config_path(None), self.tmp / "textquest.yaml")
        self.assertFalse(get_config().clear_screen)

    def test_env_var(self):
        path = self.tmp / "elsewhere.yaml"
        path.write_text("{}\n", encoding="utf-8")
        os.environ["TEXTQUEST_CONFIG"] = str(path)
        self.assertEqual(resolve_config_path(None), path)

    def test_missing_explicit_config(self):
        with self.assertRaises(FileNotFoundError):
            get_config(str(self.tmp / "nope.yaml"))

    def test_malformed_config(self):
        path = self.tmp / "textquest.yaml"
        for text in ["world: [unclosed\n", "- just\n- a list\n", "world:\n  - path\n", "audit:\n  path: 5\n"]:
            path.write_text(text, encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(path)

    def test_empty_sections_use_defaults(self):
        path = self.tmp / "textquest.yaml"
        path.write_text("world:\ndisplay:\n", encoding="utf-8")
        cfg = load_config(path)
        self.assertEqual(cfg.world_path, str(DEFAULT_WORLD_PATH))
        self.assertTrue(cfg.clear_screen)


class AuditTests(TempDirTestCase):
    def test_append_audit(self):
        path = self.tmp / "audit.jsonl"
        append_audit({"event": "turn", "command": "n"}, path)
        append_audit({"event": "session_end"}, path)
        lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        self.assertEqual([e["event"] for e in lines], ["turn", "session_end"])
        self.assertTrue(lines[0]["ts"].endswith("Z"))


class CliTests(TempDirTestCase):
    def setUp(self):
        super().setUp()
        self.runner = CliRunner()

    def test_play_end_to_end(self):
        commands = "take brass key\nn\nuse brass key\nn\ni\nquit\n"
        result = self.runner.invoke(app, ["play", "--world", str(WORLD_PATH), "--no-clear"], input=commands)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("=== Prison Cell ===", result.output)
        self.assertIn("You picked up the brass key.", result.output)
        self.assertIn("The door is locked.", result.output)
        self.assertIn("You unlocked the door to the Guard Hall!", result.output)
        self.assertIn("=== Guard Hall ===", result.output)
        self.assertIn(" - brass key", result.output)
        self.assertIn("Goodbye!", result.output)

    def test_end_of_input_quits(self):
        result = self.runner.invoke(app, ["play", "--world", str(WORLD_PATH), "--no-clear"], input="look\n")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Goodbye!", result.output)

    def test_audit_trail(self):
        audit_path = self.tmp / "audit.jsonl"
        config = self.tmp / "textquest.yaml"
        config.write_text(
            f"world:\n  path: {WORLD_PATH.as_posix()}\n"
            "display:\n  clear_screen: false\n"
            f"audit:\n  enabled: true\n  path: {audit_path.as_posix()}\n",
            encoding="utf-8",
        )
        result = self.runner.invoke(app, ["play", "--config", str(config)], input="take straw\nq\n")
        self.assertEqual(result.exit_code, 0, result.output)

        events = [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]
        self.assertEqual([e["event"] for e in events], ["session_start", "turn", "turn", "session_end"])
        self.assertEqual(events[1]["message"], "You picked up the bundle of straw.")
        self.assertEqual(events[-1]["inventory"], ["straw"])

    def test_bad_world_is_fatal(self):
        broken = self.tmp / "broken.json"
        broken.write_text('{"starting_room": "nowhere", "rooms": [], "items": []}', encoding="utf-8")
        result = self.runner.invoke(app, ["play", "--world", str(broken)], input="quit\n")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("does not exist", result.output)
        self.assertNotIn("Goodbye!", result.output)

        result = self.runner.invoke(app, ["play", "--world", str(self.tmp / "missing.json")])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("world file not found", result.output)

        latin1 = self.tmp / "latin1.json"
        latin1.write_bytes(b'{"starting_room": "\xff"}')
        result = self.runner.invoke(app, ["play", "--world", str(latin1)])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("unable to decode", result.output)

    def test_bad_config_is_fatal(self):
        config = self.tmp / "textquest.yaml"
        config.write_text("world: [unclosed\n", encoding="utf-8")
        result = self.runner.invoke(app, ["play", "--config", str(config)], input="quit\n")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("unable to parse", result.output)
        self.assertNotIn("Goodbye!", result.output)

    def test_room_shown_after_every_turn(self):
        commands = "take brass key\ndance\n\nquit\n"
        result = self.runner.invoke(app, ["play", "--world", str(WORLD_PATH), "--no-clear"], input=commands)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.count("=== Prison Cell ==="), 4)

        after_pickup = result.output.split("You picked up the brass key.", 1)[1]
        self.assertIn("=== Prison Cell ===", after_pickup)
        self.assertIn(" - bundle of straw", after_pickup)
        self.assertNotIn(" - brass key", after_pickup)

    def test_validate(self):
        result = self.runner.invoke(app, ["validate", "--world", str(WORLD_PATH)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("5 rooms, 4 items", result.output)

    def test_version(self):
        result = self.runner.invoke(app, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertTrue(result.output.strip())


if __name__ == "__main__":
    unittest.main()
