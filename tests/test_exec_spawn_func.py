"""Tests for the subprocess-backed spawn function, using real processes."""

from __future__ import annotations

import errno
import os
import pathlib
import shutil
import typing as t

import pytest

from libinteractive import exc
from libinteractive.spawn_func.exec import ExecSpawnFunc
from libinteractive.spawner import ExpectSpawner

pytestmark = pytest.mark.skipif(
    shutil.which("sh") is None,
    reason="requires a POSIX userland",
)


def test_exec_spawn_func() -> None:
    """Pipes, start and wait all succeed for a real command."""
    exec_spawn_func = ExecSpawnFunc()
    cmd = exec_spawn_func.command("pwd")
    assert cmd is not None
    assert cmd is not exec_spawn_func

    stdin = cmd.stdin_pipe()
    assert stdin is not None

    stdout = cmd.stdout_pipe()
    assert stdout is not None

    cmd.start()
    assert cmd.pid is not None

    assert stdout.read().strip()
    cmd.wait()

    stdin.close()
    stdout.close()


def test_command_carries_cwd(tmp_path: pathlib.Path) -> None:
    """Handles created by command() inherit the factory's working directory."""
    cmd = ExecSpawnFunc(cwd=tmp_path).command("pwd")
    stdout = cmd.stdout_pipe()
    cmd.start()

    output = stdout.read().decode().strip()
    cmd.wait()
    stdout.close()

    assert pathlib.Path(output).resolve() == tmp_path.resolve()


def test_command_carries_env() -> None:
    """Handles created by command() inherit the factory's environment."""
    cmd = ExecSpawnFunc(env={"LIBINTERACTIVE_VALUE": "42"}).command(
        "sh",
        ["-c", 'echo "$LIBINTERACTIVE_VALUE"'],
    )
    stdout = cmd.stdout_pipe()
    cmd.start()

    assert stdout.read() == b"42\n"
    cmd.wait()
    stdout.close()


def test_wait_raises_on_nonzero_exit() -> None:
    """A non-zero exit status surfaces as ProcessExitError from wait()."""
    cmd = ExecSpawnFunc().command("sh", ["-c", "exit 3"])
    cmd.start()

    with pytest.raises(exc.ProcessExitError) as excinfo:
        cmd.wait()

    assert excinfo.value.returncode == 3
    assert excinfo.value.cmd == ["sh", "-c", "exit 3"]


def test_start_missing_executable_closes_pipes() -> None:
    """The OS error escapes start() unchanged and pipes are released."""
    cmd = ExecSpawnFunc().command("libinteractive-no-such-binary")
    stdin = cmd.stdin_pipe()
    stdout = cmd.stdout_pipe()

    with pytest.raises(FileNotFoundError):
        cmd.start()

    assert stdin.closed
    assert stdout.closed


class MisuseFixture(t.NamedTuple):
    """Fixture for out-of-order use of a spawn function handle."""

    test_id: str
    steps: list[str]
    failing_step: str
    expected_error: type[exc.SpawnFuncError]


MISUSE_FIXTURES: list[MisuseFixture] = [
    MisuseFixture(
        test_id="stdin_pipe_before_command",
        steps=[],
        failing_step="stdin_pipe",
        expected_error=exc.CommandNotConfigured,
    ),
    MisuseFixture(
        test_id="start_before_command",
        steps=[],
        failing_step="start",
        expected_error=exc.CommandNotConfigured,
    ),
    MisuseFixture(
        test_id="stdin_pipe_twice",
        steps=["command", "stdin_pipe"],
        failing_step="stdin_pipe",
        expected_error=exc.PipeAlreadyAcquired,
    ),
    MisuseFixture(
        test_id="stdout_pipe_twice",
        steps=["command", "stdout_pipe"],
        failing_step="stdout_pipe",
        expected_error=exc.PipeAlreadyAcquired,
    ),
    MisuseFixture(
        test_id="stdout_pipe_after_start",
        steps=["command", "start"],
        failing_step="stdout_pipe",
        expected_error=exc.ProcessAlreadyStarted,
    ),
    MisuseFixture(
        test_id="start_twice",
        steps=["command", "start"],
        failing_step="start",
        expected_error=exc.ProcessAlreadyStarted,
    ),
    MisuseFixture(
        test_id="wait_before_start",
        steps=["command"],
        failing_step="wait",
        expected_error=exc.ProcessNotStarted,
    ),
    MisuseFixture(
        test_id="wait_twice",
        steps=["command", "start", "wait"],
        failing_step="wait",
        expected_error=exc.WaitAlreadyCalled,
    ),
]


@pytest.mark.parametrize(
    list(MisuseFixture._fields),
    MISUSE_FIXTURES,
    ids=[fixture.test_id for fixture in MISUSE_FIXTURES],
)
def test_misuse(
    test_id: str,
    steps: list[str],
    failing_step: str,
    expected_error: type[exc.SpawnFuncError],
) -> None:
    """Out-of-order calls raise the matching SpawnFuncError."""
    handle = ExecSpawnFunc()
    for step in steps:
        if step == "command":
            handle = handle.command("true")
        else:
            getattr(handle, step)()

    with pytest.raises(expected_error):
        getattr(handle, failing_step)()

    if handle.process is None:
        handle._close_child_ends()
        handle._close_parent_ends()
    elif "wait" not in steps:
        handle.wait()


def test_spawn_real_process(exec_spawner: ExpectSpawner, expect_timeout: float) -> None:
    """End to end: spawn cat, echo through it, observe a clean exit."""
    context = exec_spawner.spawn("cat", [], expect_timeout)
    expecter = context.get_expecter()

    expecter.send("ping\n")
    assert expecter.expect("ping").match == "ping"

    expecter.close()
    assert context.get_error_channel().receive(timeout=expect_timeout) is None


def test_spawn_real_process_exit_error(
    exec_spawner: ExpectSpawner,
    expect_timeout: float,
) -> None:
    """A failing process reports its status on the error channel."""
    context = exec_spawner.spawn("sh", ["-c", "echo bye; exit 4"], expect_timeout)

    context.get_expecter().expect("bye")
    error = context.get_error_channel().receive(timeout=expect_timeout)

    assert isinstance(error, exc.ProcessExitError)
    assert error.returncode == 4


def test_spawn_missing_executable(exec_spawner: ExpectSpawner) -> None:
    """The start error reaches the caller of spawn() unchanged."""
    with pytest.raises(FileNotFoundError):
        exec_spawner.spawn("libinteractive-no-such-binary", [], 1)


def test_stdout_pipe_failure_releases_stdin_pipe(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Both ends of the stdin pipe are closed when stdout cannot be piped."""
    real_pipe = os.pipe
    created: list[tuple[int, int]] = []

    def pipe_once() -> tuple[int, int]:
        if created:
            raise OSError(errno.EMFILE, "Too many open files")
        fds = real_pipe()
        created.append(fds)
        return fds

    monkeypatch.setattr(os, "pipe", pipe_once)
    with pytest.raises(OSError) as excinfo:
        ExpectSpawner(ExecSpawnFunc()).spawn("cat", [], 1)
    monkeypatch.undo()

    assert excinfo.value.errno == errno.EMFILE
    assert len(created) == 1
    for fd in created[0]:
        with pytest.raises(OSError):
            os.fstat(fd)
