"""JavaScript executor run with Node.js"""

from typing import Any, Dict, Tuple

from blockexec.core.exceptions import DependencyInstallError
from blockexec.core.manifest import PACKAGE_JSON_TEMPLATE
from blockexec.core.process import ProcessHandle
from blockexec.executors.base import ExecutorState, LangExecutor
from blockexec.executors.factory import ExecutorRegistry


@ExecutorRegistry.register("javascript", aliases=("js", "node"))
class JavaScriptExecutor(LangExecutor):
    """
    Runs a JavaScript snippet with node

    Packages declared as `// exemd-deps: lodash;version=4.17.21` go into
    package.json and are installed with `npm install --prefix <root>`.
    """

    language = "javascript"
    extension = "js"
    comment_markers = ("//",)
    manifest = PACKAGE_JSON_TEMPLATE

    FALLBACK_PACKAGE = "main"

    def manifest_context(self) -> Dict[str, Any]:
        return {
            "dependencies": self.project.dependencies,
            "package": self.project.name or self.FALLBACK_PACKAGE,
            "main": f"{self.filename}.{self.extension}",
        }

    def install_dependency(self) -> None:
        """
        npm install, skipped when nothing is declared

        Raises:
            DependencyInstallError: If npm exits non-zero or times out
        """
        if not self.project.dependencies:
            return

        handle = ProcessHandle([
            self.settings.NPM_BINARY, "install", "--silent",
            "--prefix", str(self.root_dir),
        ])
        print(handle.command_line)

        result = handle.output(timeout=self.settings.INSTALL_TIMEOUT)
        if not result.success:
            reason = "timed out" if result.timed_out else f"exit code {result.exit_code}"
            raise DependencyInstallError(
                f"npm install failed ({reason}): {result.stderr.strip()}"
            )
        self.state = ExecutorState.DEPENDENCIES_INSTALLED

    def try_run(self) -> None:
        """No-op: node reports syntax errors when it runs the file"""
        pass

    def execute(self) -> ProcessHandle:
        self.build_project()
        self.install_dependency()
        self.try_run()

        # node resolves node_modules relative to the script, no cwd needed
        handle = ProcessHandle([self.settings.NODE_BINARY, str(self.source_path.resolve())])
        print(handle.command_line)
        self.state = ExecutorState.EXECUTING
        return handle

    def binaries(self) -> Tuple[str, ...]:
        if self.project.dependencies:
            return (self.settings.NODE_BINARY, self.settings.NPM_BINARY)
        return (self.settings.NODE_BINARY,)
