"""Rust executor built and run with Cargo"""

from typing import Any, Dict, Tuple

from blockexec.core.manifest import CARGO_TEMPLATE
from blockexec.core.process import ProcessHandle
from blockexec.executors.base import CompiledLangExecutor
from blockexec.executors.factory import ExecutorRegistry


@ExecutorRegistry.register("rust", aliases=("rs",))
class RustExecutor(CompiledLangExecutor):
    """
    Runs a Rust snippet as a single-binary Cargo package

    exemd-name becomes the package name, exemd-filename the binary name.
    Crates are declared as `// exemd-deps: rand;version=0.8`.
    """

    language = "rust"
    extension = "rs"
    comment_markers = ("//",)
    source_root = "src"
    manifest = CARGO_TEMPLATE

    FALLBACK_PACKAGE = "main"

    def manifest_context(self) -> Dict[str, Any]:
        return {
            "dependencies": self.project.dependencies,
            "package": self.project.name or self.FALLBACK_PACKAGE,
            "binary": self.filename,
            "binary_path": f"{self.source_root}/{self.filename}.{self.extension}",
        }

    def install_dependency(self) -> None:
        """No-op: cargo fetches crates during `cargo run`"""
        pass

    def try_run(self) -> None:
        pass

    def compile(self) -> ProcessHandle:
        manifest_path = self.root_dir / self.manifest.filename
        handle = ProcessHandle([
            self.settings.CARGO_BINARY, "run", "--quiet",
            "--manifest-path", str(manifest_path),
        ])
        print(handle.command_line)
        return handle

    def binaries(self) -> Tuple[str, ...]:
        return (self.settings.CARGO_BINARY,)
