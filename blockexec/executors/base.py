"""Abstract base classes for language executors"""

import shutil
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from blockexec.config import Settings, get_settings
from blockexec.core.manifest import ManifestTemplate
from blockexec.core.metadata import MetadataParser, ProjectDescriptor
from blockexec.core.process import ProcessHandle
from blockexec.core.scaffold import Scaffolder, check_component


class ExecutorState(str, Enum):
    """Lifecycle of an executor instance, advanced by explicit calls only"""
    UNINITIALIZED = "uninitialized"
    BUILT = "built"
    DEPENDENCIES_INSTALLED = "dependencies_installed"
    EXECUTING = "executing"


class LangExecutor(ABC):
    """
    Abstract base for language executors

    One instance per snippet. The snippet's metadata directives are parsed
    once on construction; build_project() then lays the project out on disk:

        <output_dir>/<language>/[<name>/]
            <source_root>/[<name>/]<filename>.<extension>
            <manifest filename>

    Extension Point: add a language by subclassing this (or
    CompiledLangExecutor) and registering it with @ExecutorRegistry.register
    """

    language: str = ""
    extension: str = ""
    comment_markers: Tuple[str, ...] = ("//",)
    # Source directory relative to the project root
    source_root: str = ""
    # Whether the project name adds a package directory under source_root
    namespaced: bool = False
    manifest: Optional[ManifestTemplate] = None

    def __init__(self, source: str, output_dir: Union[str, Path, None] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.source_code = source
        self.project: ProjectDescriptor = MetadataParser(
            prefix=self.settings.DIRECTIVE_PREFIX,
            comment_markers=self.comment_markers,
        ).parse(source)
        self.scaffolder = Scaffolder(output_dir if output_dir is not None else self.settings.OUTPUT_DIR)
        self.state = ExecutorState.UNINITIALIZED

        self.root_dir: Optional[Path] = None
        self.source_path: Optional[Path] = None
        self.manifest_path: Optional[Path] = None

    @property
    def filename(self) -> str:
        return self.project.entry_filename(self.settings.DEFAULT_FILENAME)

    def source_dir(self) -> Path:
        """Source directory relative to the project root"""
        path = Path(self.source_root)
        if self.namespaced and self.project.name:
            path = path / self.project.name
        return path

    def build_project(self) -> Path:
        """
        Scaffold the project, write the source file and the manifest

        Re-running redoes all I/O and overwrites previous files.

        Returns:
            Project root directory

        Raises:
            ScaffoldError: If any directory or file cannot be written,
                or the name or filename is not a plain path segment
            ManifestError: If the manifest cannot be rendered
        """
        filename = check_component(self.filename, "filename")
        source_dir = self.source_dir()
        root = self.scaffolder.create_layout(self.language, self.project.name, source_dir)
        self.root_dir = root

        self.source_path = self.scaffolder.write_file(
            self.source_code,
            root / source_dir / f"{filename}.{self.extension}"
        )
        self.create_dependency_file()

        self.state = ExecutorState.BUILT
        return root

    def manifest_context(self) -> Dict[str, Any]:
        """Template slots for the manifest"""
        return {"dependencies": self.project.dependencies}

    def render_manifest(self) -> Optional[str]:
        """Render the manifest text without writing it"""
        if self.manifest is None:
            return None
        return self.manifest.render(**self.manifest_context())

    def create_dependency_file(self) -> Optional[str]:
        """Render the manifest and write it to the project root"""
        text = self.render_manifest()
        if text is None:
            return None
        self.manifest_path = self.manifest.write(text, self.root_dir, self.scaffolder)
        return text

    @abstractmethod
    def install_dependency(self) -> None:
        """Install declared dependencies, if the backend needs a separate step"""
        pass

    @abstractmethod
    def try_run(self) -> None:
        """
        Pre-flight validation

        Raises:
            ValidationError: If the snippet is rejected
        """
        pass

    @abstractmethod
    def execute(self) -> ProcessHandle:
        """
        Build the project and return the process that runs it

        The process is not started; the caller drives it to completion.
        """
        pass

    def binaries(self) -> Tuple[str, ...]:
        """Toolchain binaries this backend invokes"""
        return ()

    def toolchain_available(self) -> bool:
        """Check every toolchain binary is on PATH"""
        return all(shutil.which(binary) for binary in self.binaries())


class CompiledLangExecutor(LangExecutor):
    """
    Executor for languages run through a separate build tool

    execute() builds the project and delegates to compile(), which issues the
    build tool against the project root.
    """

    @abstractmethod
    def compile(self) -> ProcessHandle:
        """Return the build-tool command that compiles and runs the project"""
        pass

    def execute(self) -> ProcessHandle:
        self.build_project()
        self.install_dependency()
        self.try_run()
        handle = self.compile()
        self.state = ExecutorState.EXECUTING
        return handle
