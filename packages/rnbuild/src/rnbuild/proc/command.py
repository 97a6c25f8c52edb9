"""
Command runner for external toolchains.

This module wraps subprocess for the build commands:
- Command: immutable builder for argv, extra environment and working dir
- Command.run(): blocking run with fully captured output
- Command.run_live(): run with stdout/stderr streamed through a MultiStep
  live window; the window's history becomes the captured output
- run_all / run_all_live: sequential execution, stopping at first failure

The child inherits stdin; stdout and stderr are always piped. Extra
environment variables are merged over the current environment so PATH,
HOME etc. are preserved.
"""

import logging
import os
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from rnbuild.config import settings
from rnbuild.progress import MultiStep, Terminal

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """
    Raised when a command cannot be spawned or exits non-zero.

    Attributes:
        command: Rendered command line
        returncode: Exit status, or None if the command never started
        stdout: Captured standard output (live history for run_live)
        stderr: Captured standard error (live history for run_live)
        env: Extra environment passed to a live command, if any
    """

    def __init__(
        self,
        command: str,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        env: dict[str, str] | None = None,
        reason: str | None = None,
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.env = env

        if reason is not None:
            message = f"failed to execute `{command}`: {reason}"
        elif env is not None:
            message = f"command `{command}` failed (exit {returncode})\nout: {stdout}\nenv: {env}"
        else:
            message = (
                f"command `{command}` failed (exit {returncode})\n"
                f"stdout: {stdout}\nstderr: {stderr}"
            )
        super().__init__(message)


@dataclass
class CommandOutput:
    """
    Result of a finished command.

    Attributes:
        returncode: Process exit status
        raw_stdout: Standard output captured by run()
        raw_stderr: Standard error captured by run()
        live_output: Merged history from run_live(), overrides both streams
    """

    returncode: int
    raw_stdout: str = ""
    raw_stderr: str = ""
    live_output: str | None = None

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def stdout(self) -> str:
        if self.live_output is not None:
            return self.live_output
        return self.raw_stdout

    @property
    def stderr(self) -> str:
        if self.live_output is not None:
            return self.live_output
        return self.raw_stderr


@dataclass(frozen=True)
class Command:
    """
    External command to spawn.

    Builder methods return a new Command, so a base command can be shared.

    Example:
        cmd = Command("yarn").args(["ubrn", "build", "android"]).cwd("app")
        out = cmd.run_live("building with ubrn")
    """

    program: str
    arguments: tuple[str, ...] = ()
    environment: tuple[tuple[str, str], ...] = ()
    workdir: Path | None = None

    def arg(self, value: str) -> "Command":
        """Add a single argument."""
        return replace(self, arguments=(*self.arguments, str(value)))

    def args(self, values: Iterable[str]) -> "Command":
        """Add multiple arguments."""
        return replace(self, arguments=(*self.arguments, *(str(v) for v in values)))

    def env(self, key: str, value: str) -> "Command":
        """Set an environment variable for the child."""
        return replace(self, environment=(*self.environment, (key, value)))

    def cwd(self, path: str | Path) -> "Command":
        """Set the working directory for the child."""
        return replace(self, workdir=Path(path))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.arguments]

    @property
    def extra_env(self) -> dict[str, str]:
        """Environment variables set on this command (later wins)."""
        return dict(self.environment)

    def build_env(self) -> dict[str, str]:
        """Current environment with this command's variables merged in."""
        env = os.environ.copy()
        env.update(self.extra_env)
        return env

    def __str__(self) -> str:
        return " ".join(self.argv)

    def run(self) -> CommandOutput:
        """
        Run to completion and capture stdout/stderr.

        Returns:
            CommandOutput with the decoded streams

        Raises:
            CommandError: If the command cannot start or exits non-zero
        """
        logger.debug(f"Running `{self}`")
        try:
            completed = subprocess.run(
                self.argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self.build_env(),
                cwd=self.workdir,
            )
        except OSError as e:
            raise CommandError(str(self), reason=str(e)) from e

        output = CommandOutput(
            returncode=completed.returncode,
            raw_stdout=completed.stdout.decode("utf-8", errors="replace"),
            raw_stderr=completed.stderr.decode("utf-8", errors="replace"),
        )
        if not output.success:
            raise CommandError(str(self), output.returncode, output.raw_stdout, output.raw_stderr)
        return output

    def run_live(
        self,
        label: str,
        rows: int | None = None,
        terminal: Terminal | None = None,
    ) -> CommandOutput:
        """
        Run while showing the last lines of output in a live window.

        stdout and stderr are both registered with one MultiStep session.
        After the process exits the readers get settings.drain_grace seconds
        to reach end-of-stream, so the history normally holds every line.
        Pipes still held open by a lingering grandchild do not delay the
        return; their remaining lines are dropped. On failure the live
        region is erased before the error propagates.

        Args:
            label: Title of the live window
            rows: Window height (default: settings.live_rows)
            terminal: Terminal to draw on (default: stderr)

        Returns:
            CommandOutput whose stdout/stderr are the merged history

        Raises:
            CommandError: If the command cannot start or exits non-zero
        """
        rows = settings.live_rows if rows is None else rows
        logger.debug(f"Running `{self}` live as '{label}'")

        with MultiStep(label, rows, terminal=terminal) as progress:
            try:
                proc = subprocess.Popen(
                    self.argv,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    env=self.build_env(),
                    cwd=self.workdir,
                )
            except OSError as e:
                raise CommandError(str(self), reason=str(e)) from e

            progress.register_reader(proc.stdout)
            progress.register_reader(proc.stderr)
            try:
                returncode = proc.wait()
            except BaseException:
                _terminate(proc)
                raise
            if not progress.drain(timeout=settings.drain_grace):
                logger.debug(f"Output pipes of `{self}` still open after exit, not waiting")

            # Raised inside the session so the live region is erased, not completed
            if returncode != 0:
                progress.flush()
                history = progress.output()
                raise CommandError(str(self), returncode, history, history, env=self.extra_env)

        return CommandOutput(returncode=returncode, live_output=progress.output())


def _terminate(proc: subprocess.Popen, timeout: float = 5.0) -> None:
    """
    Terminate a child that is still running.

    Sends SIGTERM, waits, escalates to SIGKILL if needed. Always waits
    for the process to prevent zombies.
    """
    if proc.poll() is not None:
        return

    proc.terminate()
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def run_all(commands: Iterable[Command]) -> list[CommandOutput]:
    """Run commands in order, stopping at the first failure."""
    return [command.run() for command in commands]


def run_all_live(commands: Sequence[Command], labels: Sequence[str]) -> list[CommandOutput]:
    """
    Run commands live in order, stopping at the first failure.

    Args:
        commands: Commands to run
        labels: One label per command; the last label is reused when
            there are fewer labels than commands

    Raises:
        ValueError: If commands are given without any label
    """
    if commands and not labels:
        raise ValueError("run_all_live needs at least one label")
    return [
        command.run_live(labels[min(i, len(labels) - 1)])
        for i, command in enumerate(commands)
    ]
