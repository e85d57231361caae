from __future__ import annotations

import io
import os
import sys
import tempfile
import unittest
from pathlib import Path

from _testutil import ensure_repo_on_path


class TestLocalContext(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_getenv_treats_empty_as_unset(self) -> None:
        from script_service.context import LocalContext

        ctx = LocalContext(env={"SET": "1", "EMPTY": ""})

        self.assertEqual(ctx.getenv("SET"), "1")
        self.assertIsNone(ctx.getenv("EMPTY"))
        self.assertIsNone(ctx.getenv("MISSING"))

    def test_output(self) -> None:
        from script_service.context import LocalContext

        out = io.StringIO()
        ctx = LocalContext(env={}, out=out)

        ctx.puts("hello")
        ctx.print_task("Pushing script")

        self.assertEqual(out.getvalue(), "hello\n* Pushing script\n")

    def test_write_relative_to_root(self) -> None:
        from script_service.context import LocalContext

        with tempfile.TemporaryDirectory() as td:
            ctx = LocalContext(root=Path(td), env={})
            path = ctx.write("script.config.yml", "version: 1\n")

            self.assertEqual(path, Path(td) / "script.config.yml")
            self.assertEqual(path.read_text(encoding="utf-8"), "version: 1\n")

        with self.assertRaises(RuntimeError):
            LocalContext(env={}).write("x", "y")

    def test_spawn_uses_snapshot_env(self) -> None:
        import subprocess

        from script_service.context import LocalContext

        ctx = LocalContext(env={"SCRIPT_CTX_MARKER": "snap"})
        proc = ctx.spawn(
            [sys.executable, "-c", "import os; print(os.environ.get('SCRIPT_CTX_MARKER', ''))"],
            stdout=subprocess.PIPE,
            text=True,
        )
        stdout, _ = proc.communicate(timeout=30)

        self.assertEqual(proc.returncode, 0)
        self.assertEqual(stdout.strip(), "snap")

    @unittest.skipUnless(os.name == "posix", "POSIX shell syntax")
    def test_spawn_runs_lone_command_string_through_shell(self) -> None:
        import subprocess

        from script_service.context import LocalContext

        ctx = LocalContext(env={"PATH": os.environ.get("PATH", ""), "SCRIPT_CTX_MARKER": "snap"})
        proc = ctx.spawn('echo "$SCRIPT_CTX_MARKER"', stdout=subprocess.PIPE, text=True)
        stdout, _ = proc.communicate(timeout=30)

        self.assertEqual(proc.returncode, 0)
        self.assertEqual(stdout.strip(), "snap")

    def test_app_metadata_is_lazy_dict(self) -> None:
        from script_service.context import LocalContext

        ctx = LocalContext(env={})
        ctx.app_metadata["api_key"] = "k"

        self.assertEqual(ctx.app_metadata, {"api_key": "k"})
        ctx.app_metadata = {}
        self.assertEqual(ctx.app_metadata, {})


if __name__ == "__main__":
    unittest.main()
