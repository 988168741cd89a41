"""Shared fixtures: env files, payloads and fake ssh/scp process runners."""

import subprocess
from pathlib import Path
from typing import Callable, List, Optional

import pytest


def write_env(path: Path, **values) -> Path:
    path.write_text("".join(f"{key}={value}\n" for key, value in values.items()))
    return path


class FakeRunner:
    """Stands in for subprocess.run; answers by program name."""

    def __init__(self, responder: Optional[Callable[[List[str]], tuple]] = None):
        self.calls: List[List[str]] = []
        self.envs: List[dict] = []
        self._responder = responder or (lambda argv: (0, "", ""))

    def __call__(self, argv, **kwargs):
        self.calls.append(list(argv))
        self.envs.append(kwargs.get("env") or {})
        returncode, stdout, stderr = self._responder(argv)
        return subprocess.CompletedProcess(argv, returncode, stdout, stderr)

    def programs(self) -> List[str]:
        return [program_of(argv) for argv in self.calls]


class FakeProcess:
    def __init__(self, lines, returncode: int = 0):
        self.stdout = lines
        self.returncode = returncode
        self.killed = False
        self._finished = False

    def wait(self):
        self._finished = True
        return self.returncode

    def poll(self):
        return self.returncode if self._finished else None

    def kill(self):
        self.killed = True
        self._finished = True


class FakePopen:
    """Stands in for subprocess.Popen; replays a remote transcript."""

    def __init__(self, lines=(), returncode: int = 0):
        self.lines = lines
        self.returncode = returncode
        self.calls: List[List[str]] = []
        self.processes: List[FakeProcess] = []

    def __call__(self, argv, **kwargs):
        self.calls.append(list(argv))
        lines = self.lines() if callable(self.lines) else list(self.lines)
        process = FakeProcess(lines, self.returncode)
        self.processes.append(process)
        return process


def program_of(argv: List[str]) -> str:
    """First of ssh/scp in argv (skipping an sshpass prefix)."""
    for arg in argv:
        if arg in ("ssh", "scp"):
            return arg
    return argv[0]


@pytest.fixture
def env_file(tmp_path):
    return write_env(
        tmp_path / "deploy.env",
        remoteHost="10.0.0.5",
        remoteSshPort="22",
        remoteUsername="deployer",
    )


@pytest.fixture
def payload(tmp_path):
    path = tmp_path / "setup.sh"
    path.write_text("#!/bin/bash\necho setup\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def staging_base(tmp_path):
    base = tmp_path / "staging"
    base.mkdir()
    return base


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def no_sshpass():
    return lambda name: None


@pytest.fixture
def with_sshpass():
    return lambda name: f"/usr/bin/{name}"
