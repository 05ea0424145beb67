"""
Emulator session launching.

A session is one run of the Visual Pinball executable for a single table:

    IDLE -> LAUNCHING -> RUNNING -> {CLOSED_BY_PLAYER, NORMAL_EXIT, FAILED} -> IDLE

Only one session may be active at a time. Launch failures are reported as a
FAILED outcome and never terminate the hosting process.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

PLAY_FLAG = "-play"
PLAYER_CLOSED_MARKER = "Player closed."
TERMINATE_TIMEOUT = 5.0


class SessionState(Enum):
    """Lifecycle states of the session launcher."""
    IDLE = "idle"
    LAUNCHING = "launching"
    RUNNING = "running"
    CLOSED_BY_PLAYER = "closed_by_player"
    NORMAL_EXIT = "normal_exit"
    FAILED = "failed"


class OutcomeKind(Enum):
    """How a session ended."""
    NORMAL_EXIT = "normal_exit"
    CLOSED_BY_PLAYER = "closed_by_player"
    FAILED = "failed"


class SessionBusyError(Exception):
    """Raised when an operation conflicts with a running session."""
    pass


@dataclass(frozen=True)
class SessionOutcome:
    """Result of a single emulator session."""
    kind: OutcomeKind
    reason: Optional[str] = None
    return_code: Optional[int] = None
    stdout: str = ""

    @classmethod
    def normal_exit(cls, return_code: int = 0, stdout: str = "") -> "SessionOutcome":
        return cls(OutcomeKind.NORMAL_EXIT, return_code=return_code, stdout=stdout)

    @classmethod
    def closed_by_player(cls, return_code: int = 0, stdout: str = "") -> "SessionOutcome":
        return cls(OutcomeKind.CLOSED_BY_PLAYER, return_code=return_code, stdout=stdout)

    @classmethod
    def failed(
        cls,
        reason: str,
        return_code: Optional[int] = None,
        stdout: str = ""
    ) -> "SessionOutcome":
        return cls(OutcomeKind.FAILED, reason=reason, return_code=return_code, stdout=stdout)

    @property
    def is_failure(self) -> bool:
        return self.kind == OutcomeKind.FAILED

    def describe(self) -> str:
        if self.kind == OutcomeKind.CLOSED_BY_PLAYER:
            return "table was closed by the player"
        if self.kind == OutcomeKind.NORMAL_EXIT:
            return "emulator exited"
        return f"session failed: {self.reason}"


_TERMINAL_STATES = {
    OutcomeKind.NORMAL_EXIT: SessionState.NORMAL_EXIT,
    OutcomeKind.CLOSED_BY_PLAYER: SessionState.CLOSED_BY_PLAYER,
    OutcomeKind.FAILED: SessionState.FAILED,
}


def build_command(executable: Union[str, Path], table_path: Union[str, Path]) -> List[str]:
    """
    Build the emulator command line.

    Args:
        executable: Visual Pinball executable
        table_path: Table file to play

    Returns:
        Argument list: executable, ``-play``, absolute table path
    """
    return [
        str(Path(executable).expanduser()),
        PLAY_FLAG,
        str(Path(table_path).expanduser().absolute()),
    ]


def classify_output(stdout: str, return_code: int = 0) -> SessionOutcome:
    """
    Classify a successful emulator run from its standard output.

    Visual Pinball prints ``Player closed.`` when the player leaves the table.
    """
    if PLAYER_CLOSED_MARKER in stdout:
        return SessionOutcome.closed_by_player(return_code=return_code, stdout=stdout)
    return SessionOutcome.normal_exit(return_code=return_code, stdout=stdout)


class SessionLauncher:
    """
    Launch the emulator and wait for it to exit.

    ``launch`` is a coroutine so callers can run it as a background task and
    keep their UI responsive; cancelling that task terminates the emulator.
    A second ``launch`` while one is active is rejected with a FAILED outcome
    and leaves the running session untouched.

    Example:
        launcher = SessionLauncher()
        outcome = await launcher.launch("/opt/vpinball/VPinballX_GL", table_path)
        if outcome.is_failure:
            logger.error(outcome.reason)
    """

    def __init__(self, on_state_change: Optional[Callable[[SessionState], None]] = None):
        """
        Initialize session launcher

        Args:
            on_state_change: Optional callback invoked with every new state
        """
        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self.on_state_change = on_state_change
        self.last_outcome: Optional[SessionOutcome] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        logger.debug(f"Session state: {state.value}")
        if self.on_state_change:
            self.on_state_change(state)

    async def launch(
        self,
        executable: Union[str, Path],
        table_path: Union[str, Path]
    ) -> SessionOutcome:
        """
        Run one emulator session for a table.

        Args:
            executable: Visual Pinball executable
            table_path: Table file to play

        Returns:
            SessionOutcome describing how the session ended

        Raises:
            asyncio.CancelledError: If the awaiting task is cancelled; the
                emulator is terminated and the launcher returns to IDLE first
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Launch rejected: a session is already running")
            return SessionOutcome.failed("session already running")

        try:
            return await self._run(executable, table_path)
        finally:
            self._lock.release()

    def launch_blocking(
        self,
        executable: Union[str, Path],
        table_path: Union[str, Path]
    ) -> SessionOutcome:
        """Run ``launch`` to completion on a fresh event loop."""
        return asyncio.run(self.launch(executable, table_path))

    async def _run(self, executable, table_path) -> SessionOutcome:
        command = build_command(executable, table_path)
        self._set_state(SessionState.LAUNCHING)
        logger.info(f"Launching table: {command[-1]}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except asyncio.CancelledError:
            logger.info("Session cancelled while starting the emulator")
            self._set_state(SessionState.IDLE)
            raise
        except (OSError, ValueError) as e:
            return self._finish(SessionOutcome.failed(f"failed to start emulator: {e}"))

        self._set_state(SessionState.RUNNING)

        try:
            stdout_data, _ = await process.communicate()
        except asyncio.CancelledError:
            logger.info("Session cancelled, terminating emulator")
            await self._terminate(process)
            self._set_state(SessionState.IDLE)
            raise
        except OSError as e:
            await self._terminate(process)
            return self._finish(SessionOutcome.failed(f"failed waiting for emulator: {e}"))

        stdout = stdout_data.decode("utf-8", errors="replace") if stdout_data else ""
        return_code = process.returncode

        if return_code != 0:
            outcome = SessionOutcome.failed(
                f"emulator exited with status {return_code}",
                return_code=return_code,
                stdout=stdout,
            )
        else:
            outcome = classify_output(stdout, return_code=return_code)

        return self._finish(outcome)

    def _finish(self, outcome: SessionOutcome) -> SessionOutcome:
        self._set_state(_TERMINAL_STATES[outcome.kind])
        if outcome.is_failure:
            logger.error(f"Session failed: {outcome.reason}")
        else:
            logger.info(f"Session ended: {outcome.describe()}")
        self.last_outcome = outcome
        self._set_state(SessionState.IDLE)
        return outcome

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT)
        except ProcessLookupError:
            pass
        except asyncio.TimeoutError:
            logger.warning("Emulator did not exit after terminate, killing it")
            process.kill()
            await process.wait()
