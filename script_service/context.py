from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, TextIO


class ExecutionContext(Protocol):
    """Capabilities a command needs from the running process."""

    root: Optional[Path]

    def getenv(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def puts(self, text: str) -> None:
        raise NotImplementedError

    def print_task(self, text: str) -> None:
        raise NotImplementedError

    def write(self, fname: str, content: str) -> Path:
        raise NotImplementedError

    def spawn(self, *args: Any, **kwargs: Any) -> subprocess.Popen:
        raise NotImplementedError


class LocalContext:
    """ExecutionContext for the current process.

    The environment is snapshotted at construction; an explicit `env` mapping
    replaces it entirely (tests pass one to avoid touching os.environ).
    """

    def __init__(
        self,
        *,
        root: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        out: Optional[TextIO] = None,
    ):
        self.root = Path(root) if root is not None else None
        self._env: Dict[str, str] = dict(env if env is not None else os.environ)
        self._out = out
        self._app_metadata: Optional[Dict[str, Any]] = None

    @property
    def app_metadata(self) -> Dict[str, Any]:
        if self._app_metadata is None:
            self._app_metadata = {}
        return self._app_metadata

    @app_metadata.setter
    def app_metadata(self, value: Dict[str, Any]) -> None:
        self._app_metadata = value

    def getenv(self, name: str) -> Optional[str]:
        v = self._env.get(name)
        return None if v == "" else v

    def puts(self, text: str) -> None:
        stream = self._out if self._out is not None else sys.stdout
        stream.write(f"{text}\n")
        stream.flush()

    def print_task(self, text: str) -> None:
        self.puts(f"* {text}")

    def write(self, fname: str, content: str) -> Path:
        if self.root is None:
            raise RuntimeError("LocalContext.root is not set; cannot write files")
        path = self.root / fname
        path.write_text(content, encoding="utf-8")
        return path

    def spawn(self, *args: Any, **kwargs: Any) -> subprocess.Popen:
        # Spawned processes inherit the snapshot, not the live os.environ.
        kwargs.setdefault("env", dict(self._env))
        if self.root is not None:
            kwargs.setdefault("cwd", str(self.root))
        if len(args) == 1 and isinstance(args[0], str):
            # A lone command line runs through the shell.
            kwargs.setdefault("shell", True)
            return subprocess.Popen(args[0], **kwargs)
        cmd = list(args[0]) if len(args) == 1 and isinstance(args[0], (list, tuple)) else list(args)
        return subprocess.Popen(cmd, **kwargs)
