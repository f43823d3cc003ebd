"""On-disk project scaffolding"""

from pathlib import Path
from typing import Union

from blockexec.core.exceptions import ScaffoldError

PathLike = Union[str, Path]


def check_component(value: str, what: str) -> str:
    """
    Reject a directive value that would not stay a single path segment

    Raises:
        ScaffoldError: If value holds a separator or is `.` or `..`
    """
    if value in (".", "..") or "/" in value or "\\" in value or "\0" in value:
        raise ScaffoldError(f"Invalid {what} '{value}': must be a plain name")
    return value


class Scaffolder:
    """
    Creates project directories under a base output directory

    Layout:
        <base_dir>/<language>/[<project name>/]<source_root>/...

    Project names must be a single path segment, see check_component.

    Two builds of the same (language, project name) share a directory and
    overwrite each other's files. Callers building concurrently must use
    distinct project names or serialize those builds.
    """

    def __init__(self, base_dir: PathLike = "output"):
        self.base_dir = Path(base_dir)

    def project_root(self, language: str, project_name: str = "") -> Path:
        """Derive the project root, without touching the filesystem"""
        root = self.base_dir / language
        if project_name:
            root = root / check_component(project_name, "project name")
        return root

    def create_layout(self, language: str, project_name: str = "",
                      source_root: PathLike = "") -> Path:
        """
        Create the project root and its source directory

        Args:
            language: Language identifier, first nesting level
            project_name: Project name, empty for the language root itself
            source_root: Path of the source directory relative to the root

        Returns:
            Project root directory

        Raises:
            ScaffoldError: If a directory cannot be created
        """
        root = self.project_root(language, project_name)
        try:
            (root / source_root).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ScaffoldError(f"Failed to create project directory {root}: {e}") from e
        return root

    def write_file(self, content: str, path: PathLike) -> Path:
        """
        Write text to path, replacing any existing file

        Parent directories are created when missing. No newline translation
        is applied, so reading the file back returns the same text.

        Raises:
            ScaffoldError: If the file cannot be written
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
        except OSError as e:
            raise ScaffoldError(f"Failed to write {path}: {e}") from e
        return path
