"""Tests for language executors"""

import os
import shutil
import sys

import pytest

from blockexec.core.exceptions import ScaffoldError, UnknownLanguageError, ValidationError
from blockexec.core.process import ProcessHandle
from blockexec.executors import (
    CompiledLangExecutor, ExecutorFactory, ExecutorRegistry, ExecutorState,
    JavaExecutor, JavaScriptExecutor, PythonExecutor, RustExecutor, get_executor
)

JODA_CODE = """// exemd-deps: joda-time:joda-time;version=2.2
// exemd-name: joda
// exemd-filename: HelloWorld
package joda;

import org.joda.time.LocalTime;

public class HelloWorld {
  public static void main(String[] args) {
    LocalTime currentTime = new LocalTime();
    System.out.println("The current local time is: " + currentTime);
  }
}
"""

HELLO_CODE = """// exemd-name: hello
package hello;

public class main {
    public static void main(String[] args) {
        System.out.println("Hello, World!");
    }
}
"""


class ScriptExecutor(CompiledLangExecutor):
    """Compiled-path executor whose build tool is the test interpreter"""

    language = "script"
    extension = "py"
    comment_markers = ("#",)
    source_root = "src"

    def install_dependency(self) -> None:
        pass

    def try_run(self) -> None:
        pass

    def compile(self) -> ProcessHandle:
        return ProcessHandle([sys.executable, str(self.source_path)])


def snapshot(root):
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*")) if path.is_file()
    }


def test_java_build_layout(tmp_path):
    """Test the named Java project layout"""
    executor = JavaExecutor(JODA_CODE, output_dir=tmp_path)
    root = executor.build_project()

    assert root == tmp_path / "java" / "joda"
    assert executor.root_dir == root
    assert executor.source_path == root / "src" / "main" / "java" / "joda" / "HelloWorld.java"
    assert executor.manifest_path == root / "build.gradle"
    assert executor.state == ExecutorState.BUILT


def test_java_build_unnamed_layout(tmp_path):
    """Test an unnamed project lives in the language directory"""
    executor = JavaExecutor("public class main {}\n", output_dir=tmp_path)
    root = executor.build_project()

    assert root == tmp_path / "java"
    assert executor.source_path == root / "src" / "main" / "java" / "main.java"


def test_source_round_trip(tmp_path):
    """Test the written source equals the snippet byte for byte"""
    executor = JavaExecutor(JODA_CODE, output_dir=tmp_path)
    executor.build_project()

    assert executor.source_path.read_bytes() == JODA_CODE.encode("utf-8")


def test_build_twice_is_idempotent(tmp_path):
    """Test rebuilding produces the same files"""
    executor = JavaExecutor(JODA_CODE, output_dir=tmp_path)
    root = executor.build_project()
    first = snapshot(root)

    executor.build_project()

    assert snapshot(root) == first
    assert set(first) == {
        "build.gradle",
        os.path.join("src", "main", "java", "joda", "HelloWorld.java"),
    }


def test_java_execute_returns_gradle_command(tmp_path):
    """Test execute builds and returns an unstarted gradle run"""
    executor = JavaExecutor(HELLO_CODE, output_dir=tmp_path)
    handle = executor.execute()

    assert isinstance(handle, ProcessHandle)
    assert handle.args == ["gradle", "-p", str(tmp_path / "java" / "hello"), "run"]
    assert executor.state == ExecutorState.EXECUTING
    assert (tmp_path / "java" / "hello" / "build.gradle").is_file()


def test_java_install_and_try_run_are_noops(tmp_path):
    """Test gradle does its own dependency resolution"""
    executor = JavaExecutor(JODA_CODE, output_dir=tmp_path)
    executor.install_dependency()
    executor.try_run()

    assert executor.state == ExecutorState.UNINITIALIZED
    assert list(tmp_path.iterdir()) == []


def test_build_failure_prevents_process_handle(tmp_path):
    """Test a filesystem error aborts execute before a handle exists"""
    (tmp_path / "java").write_text("not a directory")
    executor = JavaExecutor(HELLO_CODE, output_dir=tmp_path)

    with pytest.raises(ScaffoldError):
        executor.execute()
    assert executor.state == ExecutorState.UNINITIALIZED


def test_build_rejects_name_outside_output_dir(tmp_path):
    """Test a directive value cannot write outside the output directory"""
    executor = JavaExecutor("// exemd-name: ../../escape\n", output_dir=tmp_path / "out")

    with pytest.raises(ScaffoldError):
        executor.execute()
    assert not (tmp_path / "escape").exists()


def test_build_rejects_filename_with_separator(tmp_path):
    executor = JavaExecutor("// exemd-filename: ../Main\n", output_dir=tmp_path)

    with pytest.raises(ScaffoldError):
        executor.build_project()
    assert list(tmp_path.iterdir()) == []


def test_compiled_path_end_to_end(tmp_path):
    """Test a directive-less snippet runs through the compiled path"""
    executor = ScriptExecutor("print('Hello from the compiled path')\n", output_dir=tmp_path)
    handle = executor.execute()
    result = handle.output(timeout=60)

    assert executor.source_path == tmp_path / "script" / "src" / "main.py"
    assert result.exit_code == 0
    assert "Hello from the compiled path" in result.stdout


def test_rust_layout_and_command(tmp_path):
    executor = RustExecutor(
        "// exemd-name: dice\nfn main() { println!(\"4\"); }\n", output_dir=tmp_path
    )
    handle = executor.execute()
    root = tmp_path / "rust" / "dice"

    assert executor.source_path == root / "src" / "main.rs"
    assert handle.args == ["cargo", "run", "--quiet", "--manifest-path", str(root / "Cargo.toml")]


def test_python_execute_runs_snippet(tmp_path, monkeypatch):
    """Test the interpreted path runs the written file"""
    executor = PythonExecutor(
        "# exemd-name: demo\n# exemd-filename: hello\nprint('Hello, World!')\n",
        output_dir=tmp_path,
    )
    monkeypatch.setattr(executor.settings, "PYTHON_BINARY", sys.executable)

    result = executor.execute().output(timeout=60)

    assert executor.source_path == tmp_path / "python" / "demo" / "demo" / "hello.py"
    assert (tmp_path / "python" / "demo" / "requirements.txt").is_file()
    assert "Hello, World!" in result.stdout


def test_python_try_run_rejects_syntax_errors(tmp_path):
    executor = PythonExecutor("print('hello\n", output_dir=tmp_path)

    with pytest.raises(ValidationError):
        executor.execute()


def test_python_syntax_check_runs_before_install(tmp_path, monkeypatch):
    """Test a broken snippet with dependencies never reaches pip"""
    executor = PythonExecutor(
        "# exemd-deps: requests;version=2.31.0\nprint('hello\n", output_dir=tmp_path
    )
    monkeypatch.setattr(executor.settings, "PYTHON_BINARY", "blockexec-no-such-python")

    with pytest.raises(ValidationError):
        executor.execute()
    assert executor.state == ExecutorState.BUILT
    assert not executor.site_packages.exists()


def test_python_install_skipped_without_dependencies(tmp_path):
    executor = PythonExecutor("print(1)\n", output_dir=tmp_path)
    executor.build_project()
    executor.install_dependency()

    assert executor.state == ExecutorState.BUILT
    assert not (tmp_path / "python" / "site-packages").exists()


def test_javascript_execute_command(tmp_path):
    executor = JavaScriptExecutor("console.log('hi');\n", output_dir=tmp_path)
    handle = executor.execute()

    assert handle.args == ["node", str((tmp_path / "javascript" / "main.js").resolve())]
    assert (tmp_path / "javascript" / "package.json").is_file()


@pytest.mark.skipif(shutil.which("node") is None, reason="node not installed")
def test_javascript_end_to_end(tmp_path):
    executor = JavaScriptExecutor("console.log('Hello, World!');\n", output_dir=tmp_path)

    assert "Hello, World!" in executor.execute().output(timeout=60).stdout


@pytest.mark.skipif(
    shutil.which("gradle") is None or not os.environ.get("BLOCKEXEC_GRADLE_TESTS"),
    reason="set BLOCKEXEC_GRADLE_TESTS with a Gradle that accepts compile/mainClassName"
)
def test_java_end_to_end_with_gradle(tmp_path):
    executor = JavaExecutor(HELLO_CODE, output_dir=tmp_path)
    result = executor.execute().output(timeout=600)

    assert "Hello, World!" in result.stdout


def test_registry_resolves_aliases():
    assert ExecutorRegistry.get("java") is JavaExecutor
    assert ExecutorRegistry.get("py") is PythonExecutor
    assert ExecutorRegistry.get("JS") is JavaScriptExecutor
    assert ExecutorRegistry.get("rs") is RustExecutor
    assert ExecutorRegistry.list_providers() == ["java", "javascript", "python", "rust"]


def test_registry_aliases_for():
    assert ExecutorRegistry.aliases_for("python") == ["py", "python3"]
    assert ExecutorRegistry.aliases_for("java") == []


def test_registry_unknown_language():
    with pytest.raises(UnknownLanguageError):
        ExecutorRegistry.get("cobol")


def test_factory_creates_fresh_executors(tmp_path):
    """Test every snippet gets its own executor instance"""
    first = ExecutorFactory.create_executor("java", HELLO_CODE, tmp_path)
    second = get_executor("java", HELLO_CODE, tmp_path)

    assert isinstance(first, JavaExecutor)
    assert first is not second
    assert first.scaffolder.base_dir == tmp_path


def test_factory_uses_configured_output_dir():
    executor = ExecutorFactory.create_executor("java", HELLO_CODE)

    assert str(executor.scaffolder.base_dir) == executor.settings.OUTPUT_DIR
