"""Python executor run directly by the interpreter"""

import ast
from pathlib import Path
from typing import Tuple

from blockexec.core.exceptions import DependencyInstallError, ValidationError
from blockexec.core.manifest import REQUIREMENTS_TEMPLATE
from blockexec.core.process import ProcessHandle
from blockexec.executors.base import ExecutorState, LangExecutor
from blockexec.executors.factory import ExecutorRegistry


@ExecutorRegistry.register("python", aliases=("py", "python3"))
class PythonExecutor(LangExecutor):
    """
    Runs a Python snippet with the configured interpreter

    Dependencies (`# exemd-deps: requests;version=2.31.0`) are pinned in
    requirements.txt and installed with pip into <root>/site-packages, which
    is put on PYTHONPATH for the run.
    """

    language = "python"
    extension = "py"
    comment_markers = ("#",)
    namespaced = True
    manifest = REQUIREMENTS_TEMPLATE

    SITE_PACKAGES = "site-packages"

    @property
    def site_packages(self) -> Path:
        return self.root_dir / self.SITE_PACKAGES

    def install_dependency(self) -> None:
        """
        pip install the requirements file, skipped when nothing is declared

        Raises:
            DependencyInstallError: If pip exits non-zero or times out
        """
        if not self.project.dependencies:
            return

        handle = ProcessHandle([
            self.settings.PYTHON_BINARY, "-m", "pip", "install", "--quiet",
            "--target", str(self.site_packages),
            "-r", str(self.manifest_path),
        ])
        print(handle.command_line)

        result = handle.output(timeout=self.settings.INSTALL_TIMEOUT)
        if not result.success:
            reason = "timed out" if result.timed_out else f"exit code {result.exit_code}"
            raise DependencyInstallError(
                f"pip install failed ({reason}): {result.stderr.strip()}"
            )
        self.state = ExecutorState.DEPENDENCIES_INSTALLED

    def try_run(self) -> None:
        """Syntax check the snippet before handing it to the interpreter"""
        try:
            ast.parse(self.source_code, filename=str(self.source_path))
        except SyntaxError as e:
            raise ValidationError(f"Syntax error at line {e.lineno}: {e.msg}") from e

    def execute(self) -> ProcessHandle:
        self.build_project()
        # Syntax errors are rejected before any pip install
        self.try_run()
        self.install_dependency()

        env = {}
        if self.project.dependencies:
            env["PYTHONPATH"] = str(self.site_packages.resolve())
        handle = ProcessHandle(
            [self.settings.PYTHON_BINARY, str(self.source_path.resolve())],
            env=env,
        )
        print(handle.command_line)
        self.state = ExecutorState.EXECUTING
        return handle

    def binaries(self) -> Tuple[str, ...]:
        return (self.settings.PYTHON_BINARY,)
