"""Escalation selection, checked against the generated remote script."""

import os
import shutil
import subprocess

import pytest

from debdeploy.models.escalation import ESCALATION_ORDER, EscalationStrategy
from debdeploy.models.ssh import RemoteSession
from debdeploy.services.ssh_service import build_remote_script
from debdeploy.services.staging_service import LocalStagingArea

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


def test_fixed_order():
    assert ESCALATION_ORDER == (
        EscalationStrategy.DIRECT_ROOT,
        EscalationStrategy.PASSWORDLESS_SUDO,
        EscalationStrategy.INTERACTIVE_SU,
    )
    assert EscalationStrategy.INTERACTIVE_SU.probe is None


def test_marker_round_trip():
    for strategy in EscalationStrategy:
        assert EscalationStrategy.from_marker(strategy.marker + "\r\n") is strategy
    assert EscalationStrategy.from_marker("setup done") is None
    assert EscalationStrategy.from_marker("debdeploy: escalation=bogus") is None


def test_su_command_quotes_path_for_root_shell():
    command = EscalationStrategy.INTERACTIVE_SU.shell_command(
        "set up.sh", "/tmp/tmp.setup.abc/d/set up.sh"
    )

    assert command.startswith("printf '%s\\n' \"${rootPassword:-${ROOT_PASSWORD:-}}\" | su - root -c ")
    assert "'/tmp/tmp.setup.abc/d/set up.sh'" in command


def test_script_layout():
    session = RemoteSession(remote_dir="/tmp/tmp.setup.0123456789ab", staging_name="debdeploy.x1")

    script = build_remote_script(session, "setup.sh", ".env")
    lines = script.splitlines()

    assert lines[0] == "set -euo pipefail"
    assert lines[1] == "trap 'rm -rf -- /tmp/tmp.setup.0123456789ab' EXIT"
    assert lines[2] == "cd -- /tmp/tmp.setup.0123456789ab/debdeploy.x1"
    assert [line.split()[0] for line in lines if line.split()[0] in ("if", "elif", "else", "fi")] == [
        "if",
        "elif",
        "else",
        "fi",
    ]
    assert "  sudo ./setup.sh" in lines
    assert "/tmp/tmp.setup.0123456789ab/debdeploy.x1/setup.sh" in lines[-2]


def _stub(directory, name, body):
    path = directory / name
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)


@pytest.fixture
def remote(tmp_path):
    """A fake remote host: staged bundle under a temp dir plus stub binaries."""
    remote_dir = tmp_path / "tmp.setup.feedfacecafe"
    workdir = remote_dir / "debdeploy.stage"
    workdir.mkdir(parents=True)
    result_file = tmp_path / "payload.out"
    calls_file = tmp_path / "calls.log"

    (workdir / ".env").write_text(
        f"remoteHost=10.0.0.5\nrootPassword=s3cret\nRESULT_FILE={result_file}\n"
    )
    (workdir / "setup.sh").write_text(
        '#!/bin/sh\necho "payload ran"\n'
        'echo "$(pwd)" > "$RESULT_FILE"\nexit "${PAYLOAD_EXIT:-0}"\n'
    )

    stubs = tmp_path / "bin"
    stubs.mkdir()
    session = RemoteSession(remote_dir=str(remote_dir), staging_name="debdeploy.stage")
    return {
        "session": session,
        "remote_dir": remote_dir,
        "workdir": workdir,
        "result_file": result_file,
        "calls_file": calls_file,
        "stubs": stubs,
    }


def _run(remote, extra_env=None):
    script = build_remote_script(remote["session"], "setup.sh", ".env")
    env = dict(os.environ)
    env["PATH"] = f"{remote['stubs']}:{env['PATH']}"
    env.update(extra_env or {})
    return subprocess.run(
        ["bash", "-c", script], capture_output=True, text=True, env=env, timeout=30
    )


@needs_bash
def test_direct_root_runs_alone(remote):
    calls = remote["calls_file"]
    _stub(remote["stubs"], "id", 'echo 0\n')
    _stub(remote["stubs"], "sudo", f'echo "sudo $*" >> {calls}\nexit 1\n')
    _stub(remote["stubs"], "su", f'echo "su $*" >> {calls}\nexit 1\n')

    result = _run(remote)

    assert result.returncode == 0, result.stderr
    markers = [EscalationStrategy.from_marker(line) for line in result.stdout.splitlines()]
    assert [m for m in markers if m] == [EscalationStrategy.DIRECT_ROOT]
    assert not calls.exists()
    assert remote["result_file"].read_text().strip() == str(remote["workdir"])
    assert not remote["remote_dir"].exists()


@needs_bash
def test_passwordless_sudo(remote):
    _stub(remote["stubs"], "id", "echo 1000\n")
    _stub(remote["stubs"], "sudo", '[ "$1" = "-n" ] && exit 0\nexec "$@"\n')

    result = _run(remote)

    assert result.returncode == 0, result.stderr
    assert EscalationStrategy.PASSWORDLESS_SUDO.marker in result.stdout
    assert "payload ran" in result.stdout
    assert not remote["remote_dir"].exists()


@needs_bash
def test_interactive_su_reads_root_password_from_env_file(remote):
    password_file = remote["calls_file"]
    _stub(remote["stubs"], "id", "echo 1000\n")
    _stub(remote["stubs"], "sudo", "exit 1\n")
    _stub(remote["stubs"], "su", f'read -r pw\necho "$pw" > {password_file}\nexec sh -c "$4"\n')

    result = _run(remote)

    assert result.returncode == 0, result.stderr
    assert EscalationStrategy.INTERACTIVE_SU.marker in result.stdout
    assert password_file.read_text().strip() == "s3cret"
    assert remote["result_file"].exists()
    assert not remote["remote_dir"].exists()


@needs_bash
def test_failing_payload_still_cleans_up(remote):
    _stub(remote["stubs"], "id", "echo 0\n")

    result = _run(remote, {"PAYLOAD_EXIT": "3"})

    assert result.returncode == 3
    assert not remote["remote_dir"].exists()


@needs_bash
def test_staged_env_values_reach_payload_verbatim(remote, tmp_path, staging_base):
    env_file = tmp_path / "literal.env"
    env_file.write_text(
        "remoteHost=10.0.0.5\n"
        "sshPassword=pa$word\n"
        "rootPassword=it\"s 'q' \\x\n"
        f"RESULT_FILE={remote['result_file']}\n"
    )
    payload = tmp_path / "setup.sh"
    payload.write_text(
        '#!/bin/sh\nprintf \'%s\\n\' "$sshPassword" "$rootPassword" > "$RESULT_FILE"\n'
    )
    _stub(remote["stubs"], "id", "echo 0\n")

    with LocalStagingArea(env_file, payload, base_dir=staging_base) as staging:
        for name in (".env", "setup.sh"):
            shutil.copyfile(staging.path / name, remote["workdir"] / name)

    result = _run(remote)

    assert result.returncode == 0, result.stderr
    assert EscalationStrategy.DIRECT_ROOT.marker in result.stdout
    assert remote["result_file"].read_text().splitlines() == [
        "pa$word",
        "it\"s 'q' \\x",
    ]
    assert not remote["remote_dir"].exists()
