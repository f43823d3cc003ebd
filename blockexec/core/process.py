"""External process handles"""

import asyncio
import os
import shlex
import signal
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from blockexec.core.exceptions import ToolchainNotFoundError

# Toolchains fork (gradle runs the app, cargo the binary, npm spawns node).
# Each run gets its own process group so a timeout can kill all of it.
_NEW_SESSION = os.name != "nt"


def kill_process_tree(process: Union[subprocess.Popen, asyncio.subprocess.Process]) -> None:
    """Kill a process started by ProcessHandle together with its children"""
    if _NEW_SESSION:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        process.kill()


@dataclass
class ProcessResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_sec: float = 0.0
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return not self.timed_out and self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_sec": self.duration_sec,
            "timed_out": self.timed_out,
        }


@dataclass
class ProcessHandle:
    """
    A configured command that has not been started

    The caller owns the lifecycle: spawn it (or use output/output_async),
    capture stdout/stderr, wait, read the exit status, kill on timeout.
    Spawned processes lead their own process group; stop a spawned one
    with kill_process_tree() so its children go too.
    Exit codes and diagnostics are passed through untouched.
    """

    args: List[str]
    cwd: Optional[Path] = None
    env: Dict[str, str] = field(default_factory=dict)

    @property
    def program(self) -> str:
        return self.args[0]

    @property
    def command_line(self) -> str:
        """Shell-quoted equivalent of the command"""
        return shlex.join(str(arg) for arg in self.args)

    def _environ(self) -> Optional[Dict[str, str]]:
        if not self.env:
            return None
        environ = dict(os.environ)
        environ.update(self.env)
        return environ

    def spawn(self, **popen_kwargs) -> subprocess.Popen:
        """
        Start the process with piped stdout/stderr

        Raises:
            ToolchainNotFoundError: If the program cannot be found
        """
        popen_kwargs.setdefault('stdout', subprocess.PIPE)
        popen_kwargs.setdefault('stderr', subprocess.PIPE)
        popen_kwargs.setdefault('text', True)
        popen_kwargs.setdefault('start_new_session', _NEW_SESSION)
        try:
            return subprocess.Popen(
                [str(arg) for arg in self.args],
                cwd=self.cwd,
                env=self._environ(),
                **popen_kwargs
            )
        except FileNotFoundError as e:
            raise ToolchainNotFoundError(f"Toolchain binary not found: {self.program}") from e

    def output(self, timeout: Optional[float] = None) -> ProcessResult:
        """
        Run to completion and capture output

        Args:
            timeout: Seconds to wait before killing the process

        Returns:
            ProcessResult, with timed_out set if the process was killed
        """
        start_time = time.time()
        process = self.spawn()
        try:
            stdout, stderr = process.communicate(timeout=timeout)
            timed_out = False
        except subprocess.TimeoutExpired:
            kill_process_tree(process)
            stdout, stderr = process.communicate()
            timed_out = True

        return ProcessResult(
            exit_code=process.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            duration_sec=round(time.time() - start_time, 3),
            timed_out=timed_out,
        )

    async def output_async(self, timeout: Optional[float] = None) -> ProcessResult:
        """Asyncio variant of output()"""
        start_time = time.time()
        try:
            process = await asyncio.create_subprocess_exec(
                *[str(arg) for arg in self.args],
                cwd=self.cwd,
                env=self._environ(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=_NEW_SESSION,
            )
        except FileNotFoundError as e:
            raise ToolchainNotFoundError(f"Toolchain binary not found: {self.program}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
            timed_out = False
        except asyncio.TimeoutError:
            kill_process_tree(process)
            stdout, stderr = await process.communicate()
            timed_out = True

        return ProcessResult(
            exit_code=process.returncode,
            stdout=stdout.decode('utf-8', errors='replace') if stdout else "",
            stderr=stderr.decode('utf-8', errors='replace') if stderr else "",
            duration_sec=round(time.time() - start_time, 3),
            timed_out=timed_out,
        )
