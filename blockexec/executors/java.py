"""Java executor built and run with Gradle"""

from typing import Any, Dict, Tuple

from blockexec.core.manifest import GRADLE_TEMPLATE
from blockexec.core.process import ProcessHandle
from blockexec.executors.base import CompiledLangExecutor
from blockexec.executors.factory import ExecutorRegistry


@ExecutorRegistry.register("java")
class JavaExecutor(CompiledLangExecutor):
    """
    Runs a Java snippet as a Gradle application project

    The exemd-name directive is the Java package, exemd-filename the main
    class. Gradle resolves dependencies itself during `gradle run`.
    """

    language = "java"
    extension = "java"
    comment_markers = ("//",)
    source_root = "src/main/java"
    namespaced = True
    manifest = GRADLE_TEMPLATE

    DEPENDENCY_VERB = "compile"
    ENTRYPOINT_KEY = "mainClassName"
    FALLBACK_ENTRYPOINT = "main"

    def main_class(self) -> str:
        if self.project.name:
            return f"{self.project.name}.{self.filename}"
        return self.FALLBACK_ENTRYPOINT

    def manifest_context(self) -> Dict[str, Any]:
        return {
            "dependencies": self.project.dependencies,
            "verb": self.DEPENDENCY_VERB,
            "entrypoint_key": self.ENTRYPOINT_KEY,
            "entrypoint": self.main_class(),
            "named": bool(self.project.name),
        }

    def install_dependency(self) -> None:
        """No-op: gradle resolves dependencies during its own run"""
        pass

    def try_run(self) -> None:
        """No-op: compilation is the validation step"""
        pass

    def compile(self) -> ProcessHandle:
        # gradle -p <path> run
        handle = ProcessHandle([self.settings.GRADLE_BINARY, "-p", str(self.root_dir), "run"])
        print(handle.command_line)
        return handle

    def binaries(self) -> Tuple[str, ...]:
        return (self.settings.GRADLE_BINARY,)
