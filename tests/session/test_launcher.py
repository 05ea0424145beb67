"""Tests for the emulator session launcher."""

import asyncio
import sys
from pathlib import Path

import pytest

from vpinlauncher.session.launcher import (
    OutcomeKind,
    SessionLauncher,
    SessionOutcome,
    SessionState,
    build_command,
    classify_output,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake emulators are POSIX shell scripts")


@pytest.mark.unit
def test_build_command_uses_play_flag_and_absolute_table(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    command = build_command("/opt/vpinball/VPinballX_GL", Path("tables") / "Viper.vpx")

    assert command == [
        "/opt/vpinball/VPinballX_GL",
        "-play",
        str(tmp_path / "tables" / "Viper.vpx"),
    ]


@pytest.mark.unit
def test_classify_output():
    assert classify_output("Loading...\nPlayer closed.\n").kind == OutcomeKind.CLOSED_BY_PLAYER
    assert classify_output("Loading...\n").kind == OutcomeKind.NORMAL_EXIT
    assert classify_output("").kind == OutcomeKind.NORMAL_EXIT


@pytest.mark.unit
def test_outcome_describe():
    assert "closed" in SessionOutcome.closed_by_player().describe()
    assert SessionOutcome.failed("boom").describe() == "session failed: boom"
    assert not SessionOutcome.normal_exit().is_failure


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_player_closed_output(make_emulator, tmp_path):
    exe = make_emulator('echo "[VPX] shutting down"\necho "Player closed."\nexit 0')
    states = []
    launcher = SessionLauncher(on_state_change=states.append)

    outcome = await launcher.launch(exe, tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.CLOSED_BY_PLAYER
    assert outcome.return_code == 0
    assert states == [
        SessionState.LAUNCHING,
        SessionState.RUNNING,
        SessionState.CLOSED_BY_PLAYER,
        SessionState.IDLE,
    ]
    assert launcher.state == SessionState.IDLE
    assert launcher.last_outcome == outcome


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_normal_exit_without_marker(make_emulator, tmp_path):
    exe = make_emulator('echo "done"\nexit 0')

    outcome = await SessionLauncher().launch(exe, tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.NORMAL_EXIT
    assert outcome.stdout == "done\n"


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_stderr_is_not_classified(make_emulator, tmp_path):
    exe = make_emulator('echo "Player closed." 1>&2\nexit 0')

    outcome = await SessionLauncher().launch(exe, tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.NORMAL_EXIT


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_emulator_receives_play_arguments(make_emulator, tmp_path):
    exe = make_emulator('echo "$1|$2"')
    table = tmp_path / "Black Knight (Williams 1980).vpx"

    outcome = await SessionLauncher().launch(exe, table)

    assert outcome.stdout.strip() == f"-play|{table}"


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_nonzero_exit_is_failure(make_emulator, tmp_path):
    exe = make_emulator('echo "Player closed."\nexit 3')
    launcher = SessionLauncher()

    outcome = await launcher.launch(exe, tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.FAILED
    assert outcome.return_code == 3
    assert launcher.state == SessionState.IDLE


@pytest.mark.integration
@pytest.mark.asyncio
async def test_missing_executable_fails_and_returns_to_idle(tmp_path):
    states = []
    launcher = SessionLauncher(on_state_change=states.append)

    outcome = await launcher.launch(tmp_path / "no-such-emulator", tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.FAILED
    assert "failed to start emulator" in outcome.reason
    assert states == [SessionState.LAUNCHING, SessionState.FAILED, SessionState.IDLE]
    assert launcher.state == SessionState.IDLE
    assert not launcher.is_busy


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_launcher_is_reusable_after_failure(make_emulator, tmp_path):
    launcher = SessionLauncher()
    await launcher.launch(tmp_path / "no-such-emulator", tmp_path / "Viper.vpx")

    exe = make_emulator('echo "Player closed."')
    outcome = await launcher.launch(exe, tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.CLOSED_BY_PLAYER


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_second_launch_is_rejected_while_running(make_emulator, tmp_path):
    exe = make_emulator('sleep 0.5\necho "Player closed."')
    launcher = SessionLauncher()

    first = asyncio.create_task(launcher.launch(exe, tmp_path / "Viper.vpx"))
    await asyncio.sleep(0.1)
    assert launcher.is_busy

    second = await launcher.launch(exe, tmp_path / "Fathom.vpx")
    assert second == SessionOutcome.failed("session already running")

    outcome = await first
    assert outcome.kind == OutcomeKind.CLOSED_BY_PLAYER
    assert launcher.state == SessionState.IDLE


@posix_only
@pytest.mark.integration
@pytest.mark.asyncio
async def test_cancel_terminates_emulator(make_emulator, tmp_path):
    exe = make_emulator('exec sleep 30')
    launcher = SessionLauncher()

    task = asyncio.create_task(launcher.launch(exe, tmp_path / "Viper.vpx"))
    await asyncio.sleep(0.2)
    assert launcher.state == SessionState.RUNNING

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert launcher.state == SessionState.IDLE
    assert not launcher.is_busy


@pytest.mark.asyncio
async def test_cancel_while_starting_returns_to_idle(monkeypatch, tmp_path):
    async def slow_spawn(*args, **kwargs):
        await asyncio.sleep(10)

    monkeypatch.setattr(asyncio, "create_subprocess_exec", slow_spawn)
    launcher = SessionLauncher()

    task = asyncio.create_task(launcher.launch("/opt/vpinball/VPinballX_GL", tmp_path / "Viper.vpx"))
    await asyncio.sleep(0.05)
    assert launcher.state == SessionState.LAUNCHING

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert launcher.state == SessionState.IDLE
    assert not launcher.is_busy


@posix_only
@pytest.mark.integration
def test_launch_blocking(make_emulator, tmp_path):
    exe = make_emulator('echo "Player closed."')

    outcome = SessionLauncher().launch_blocking(exe, tmp_path / "Viper.vpx")

    assert outcome.kind == OutcomeKind.CLOSED_BY_PLAYER
