"""Running shell commands locally, optionally with sudo."""

from __future__ import annotations

import os
import select
import subprocess
import sys
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import IO


class CommandError(RuntimeError):
    """Raised when a command exits unsuccessfully.

    ``output`` holds whatever the command printed before failing.
    """

    def __init__(self, message: str, output: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class Executor(ABC):
    """Something that can run commands on a machine."""

    @abstractmethod
    def run(self, cmd: str) -> str:
        """Run ``cmd`` and return its combined output."""

    @abstractmethod
    def run_with_sudo(self, cmd: str) -> str:
        """Run ``cmd`` with elevated privileges and return its combined output."""

    @abstractmethod
    def interactive_with_sudo(self, args: Sequence[str]) -> None:
        """Open an interactive privileged shell session."""


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        return f"signal {-returncode}"
    return f"exit status {returncode}"


def _run_attached(argv: list[str]) -> None:
    """Run ``argv`` with the terminal's own streams."""
    completed = subprocess.run(argv, check=False)
    if completed.returncode != 0:
        raise CommandError(
            _describe_exit(completed.returncode), returncode=completed.returncode
        )


def _forward_stdin(dst: IO[bytes], stop: threading.Event) -> None:
    try:
        fd = sys.stdin.fileno()
    except (AttributeError, OSError, ValueError):
        return
    while not stop.is_set():
        if os.name == "posix":
            try:
                ready, _, _ = select.select([fd], [], [], 0.1)
            except (OSError, ValueError):
                return
            if not ready:
                continue
        try:
            chunk = os.read(fd, 4096)
        except OSError:
            return
        if not chunk or stop.is_set():
            return
        try:
            dst.write(chunk)
            dst.flush()
        except (OSError, ValueError):
            return


class LocalExecutor(Executor):
    """Runs commands on this machine through ``bash -c``.

    With a password, sudo reads it from standard input (``sudo -S``);
    without one, sudo is expected to work non-interactively.
    """

    def __init__(self, password: str = "") -> None:
        self._password = password

    def _run_bash(self, cmd: str, *, stdin_data: bytes | None, label: str) -> str:
        completed = subprocess.run(
            ["bash", "-c", cmd],
            input=stdin_data,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
        output = (completed.stdout or b"").decode("utf-8", errors="replace")
        if completed.returncode != 0:
            raise CommandError(
                f"{label}: {_describe_exit(completed.returncode)}, output: {output}",
                output=output,
                returncode=completed.returncode,
            )
        return output

    def run(self, cmd: str) -> str:
        return self._run_bash(cmd, stdin_data=None, label="command failed")

    def run_with_sudo(self, cmd: str) -> str:
        if _is_root():
            return self.run(cmd)
        if not self._password:
            if not cmd.startswith("sudo"):
                cmd = "sudo " + cmd
            return self.run(cmd)
        sudo_cmd = f"sudo -S -p '' {cmd}"
        return self._run_bash(
            sudo_cmd,
            stdin_data=(self._password + "\n").encode("utf-8"),
            label="sudo command failed",
        )

    def interactive_with_sudo(self, args: Sequence[str]) -> None:
        args = list(args)
        if _is_root():
            _run_attached(["bash", *args])
            return

        sudo_args = ["-S", "-p", ""] if self._password else []
        argv = ["sudo", *sudo_args, "-s", *args]
        if not self._password:
            _run_attached(argv)
            return

        proc = subprocess.Popen(argv, stdin=subprocess.PIPE)
        assert proc.stdin is not None
        try:
            proc.stdin.write((self._password + "\n").encode("utf-8"))
            proc.stdin.flush()
        except OSError:
            pass

        stop = threading.Event()
        forwarder = threading.Thread(
            target=_forward_stdin, args=(proc.stdin, stop), daemon=True
        )
        forwarder.start()
        returncode = proc.wait()
        stop.set()
        forwarder.join(timeout=0.5)
        try:
            proc.stdin.close()
        except OSError:
            pass

        if returncode != 0:
            raise CommandError(_describe_exit(returncode), returncode=returncode)