"""Execution service - Facade for building and running snippets"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from blockexec.config import get_settings
from blockexec.core.exceptions import ValidationError
from blockexec.core.metadata import ProjectDescriptor
from blockexec.executors import ExecutorFactory, ExecutorRegistry


class ExecutionService:
    """
    Builds a snippet's project, runs its toolchain and collects the output

    Facade Pattern: single entry point over the executor registry and the
    process handles it returns.

    Builds that target the same project directory are serialized within
    this process. Separate processes sharing an output directory still race.
    """

    def __init__(self):
        self.settings = get_settings()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _project_lock(self, key: str):
        """Hold the lock for one project root, dropped once nobody needs it"""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def parse(self, language: str, code: str) -> ProjectDescriptor:
        """Parse snippet metadata with the language's comment syntax"""
        return ExecutorFactory.create_executor(language, code).project

    async def execute_snippet(self, language: str, code: str,
                              timeout: Optional[int] = None) -> Dict[str, Any]:
        """
        Build and run a snippet

        Args:
            language: Language identifier or alias
            code: Snippet source
            timeout: Seconds before the toolchain process is killed

        Returns:
            Dict with execution results:
                - success: bool
                - stdout: str
                - stderr: str
                - exit_code: int
                - execution_time: float
                - error: Optional[str]
                - command: str
                - project_dir: str

        Raises:
            ValidationError: If the snippet is rejected before running
            UnknownLanguageError: If no backend handles the language
            ScaffoldError: If the project cannot be written
        """
        if len(code) > self.settings.MAX_CODE_LENGTH:
            raise ValidationError(
                f"Code exceeds maximum length of {self.settings.MAX_CODE_LENGTH} characters"
            )

        timeout = min(timeout or self.settings.DEFAULT_TIMEOUT, self.settings.MAX_TIMEOUT)
        start_time = time.time()

        executor = ExecutorFactory.create_executor(language, code)
        project_root = executor.scaffolder.project_root(executor.language, executor.project.name)

        if self.settings.SERIALIZE_BUILDS:
            async with self._project_lock(str(project_root.resolve())):
                handle, result = await self._build_and_run(executor, timeout)
        else:
            handle, result = await self._build_and_run(executor, timeout)

        if result.timed_out:
            error = 'Execution timeout'
        elif result.exit_code != 0:
            error = 'Non-zero exit code'
        else:
            error = None

        return {
            'success': result.success,
            'stdout': self._truncate_output(result.stdout),
            'stderr': self._truncate_output(result.stderr),
            'exit_code': result.exit_code,
            'execution_time': round(time.time() - start_time, 3),
            'error': error,
            'command': handle.command_line,
            'project_dir': str(executor.root_dir),
        }

    async def _build_and_run(self, executor, timeout: int):
        # Building and installing dependencies block, keep them off the event loop
        loop = asyncio.get_running_loop()
        handle = await loop.run_in_executor(None, executor.execute)
        result = await handle.output_async(timeout=timeout)
        return handle, result

    def _truncate_output(self, output: str) -> str:
        """Truncate output if too large"""
        max_size = self.settings.MAX_OUTPUT_SIZE

        if len(output) > max_size:
            truncated = output[:max_size]
            truncated += f"\n\n[Output truncated - exceeded {max_size} bytes]"
            return truncated

        return output

    def health_check(self) -> Dict[str, Any]:
        """
        Check which toolchains are available

        Returns:
            Dict mapping each registered language to its toolchain status
        """
        toolchains = {
            language: ExecutorFactory.create_executor(language, "").toolchain_available()
            for language in ExecutorRegistry.list_providers()
        }
        return {
            'toolchains': toolchains,
            'overall': any(toolchains.values()),
        }


# Singleton instance
service = ExecutionService()
