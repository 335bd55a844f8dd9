import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from rich.console import Console

from termplex import cli
from termplex.config.settings import TermplexSettings


class DemoTests(unittest.IsolatedAsyncioTestCase):
    async def test_demo_drains_every_session(self) -> None:
        console = Console(file=io.StringIO(), force_terminal=False, color_system=None, width=120)
        code = await cli.run_demo(console, TermplexSettings(progress=False), sessions=2, steps=2)
        self.assertEqual(code, 0)
        lines = console.file.getvalue().splitlines()
        text = "\n".join(lines)
        self.assertIn("root: spawned 2 sessions", text)
        self.assertIn("session 1: started at level 999", text)
        self.assertIn("session 2: started at level 998", text)
        self.assertIn("All sessions drained.", text)
        self.assertLess(text.index("root: spawned"), text.index("session 1: started"))
        self.assertLess(text.index("session 1: finished"), text.index("session 1.1: nested output"))


class MainTests(unittest.TestCase):
    def test_version_flag(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            cli.main(["--version"])
        self.assertTrue(out.getvalue().startswith("termplex "))

    def test_no_command_prints_help(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            cli.main([])
        self.assertIn("demo", out.getvalue())

    def test_demo_command_exits_with_status(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.object(
            cli.Path, "cwd", return_value=cli.Path(tmp)
        ), mock.patch.dict(os.environ, {"HOME": tmp}), mock.patch.object(
            cli, "run_demo", new=mock.AsyncMock(return_value=0)
        ) as run_demo:
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["demo", "--no-progress", "-n", "1"])
        self.assertEqual(ctx.exception.code, 0)
        settings = run_demo.await_args.args[1]
        self.assertFalse(settings.progress)
        self.assertEqual(run_demo.await_args.kwargs["sessions"], 1)


if __name__ == "__main__":
    unittest.main()
