"""Metadata directives embedded in the leading comment block of a snippet

Example (Java):

    // exemd-name: joda
    // exemd-filename: HelloWorld
    // exemd-deps: joda-time:joda-time;version=2.2
    package joda;
"""

import re
from typing import List, Optional, Tuple

from pydantic import BaseModel

from blockexec.core.exceptions import MetadataError


class Dependency(BaseModel):
    """A declared third-party library, both fields opaque"""

    name: str
    version: str

    model_config = {"frozen": True}


class ProjectDescriptor(BaseModel):
    """Structured project metadata parsed from a snippet"""

    name: str = ""
    filename: Optional[str] = None
    dependencies: Tuple[Dependency, ...] = ()
    skipped_directives: Tuple[str, ...] = ()

    model_config = {"frozen": True}

    def entry_filename(self, fallback: str = "main") -> str:
        """Filename without extension, falling back when no directive set it"""
        return self.filename or fallback


def parse_dependency(value: str) -> Dependency:
    """
    Parse a deps directive value such as ``group:artifact;version=2.2``

    Raises:
        MetadataError: If the delimiter or the version tag is missing
    """
    coordinate, sep, params = value.partition(';')
    coordinate = coordinate.strip()

    if not sep:
        raise MetadataError(f"Missing ';' in dependency '{value}'")
    if not coordinate:
        raise MetadataError(f"Missing coordinate in dependency '{value}'")

    for param in params.split(';'):
        key, eq, version = param.partition('=')
        if key.strip() == 'version' and eq and version.strip():
            return Dependency(name=coordinate, version=version.strip())

    raise MetadataError(f"Missing version in dependency '{value}'")


class MetadataParser:
    """
    Extracts a ProjectDescriptor from snippet source

    Only the leading comment block is scanned: blank lines and lines starting
    with one of ``comment_markers`` are read, the first other line ends the
    scan. Directive order does not matter.
    """

    KEYS = ('name', 'filename', 'deps')

    def __init__(self, prefix: str = "exemd", comment_markers: Tuple[str, ...] = ("//", "#")):
        self.prefix = prefix
        # Longest first so "///" is not read as "//" followed by "/"
        self.comment_markers = tuple(sorted(comment_markers, key=len, reverse=True))
        self._directive = re.compile(
            r'^(?P<key>' + '|'.join(self.KEYS) + r'):(?P<value>.*)$'
        )

    def parse(self, source: str) -> ProjectDescriptor:
        name = ""
        filename: Optional[str] = None
        dependencies: List[Dependency] = []
        skipped: List[str] = []

        for line in source.splitlines():
            stripped = line.strip()
            if not stripped:
                continue

            body = self._comment_body(stripped)
            if body is None:
                break

            directive = self._match(body)
            if directive is None:
                continue

            key, value = directive
            if key == 'name':
                name = value
            elif key == 'filename':
                if value:
                    filename = value
            else:
                try:
                    dependencies.append(parse_dependency(value))
                except MetadataError as e:
                    print(f"⚠️  Skipping directive: {e}")
                    skipped.append(stripped)

        return ProjectDescriptor(
            name=name,
            filename=filename,
            dependencies=tuple(dependencies),
            skipped_directives=tuple(skipped),
        )

    def _comment_body(self, line: str) -> Optional[str]:
        """Return the text after the comment marker, None if not a comment"""
        for marker in self.comment_markers:
            if line.startswith(marker):
                return line[len(marker):].strip()
        return None

    def _match(self, body: str) -> Optional[Tuple[str, str]]:
        head = f"{self.prefix}-"
        if not body.startswith(head):
            return None

        match = self._directive.match(body[len(head):])
        if not match:
            return None
        return match.group('key'), match.group('value').strip()


def parse_descriptor(source: str, prefix: str = "exemd",
                     comment_markers: Tuple[str, ...] = ("//", "#")) -> ProjectDescriptor:
    """Parse snippet metadata (convenience function)"""
    return MetadataParser(prefix, comment_markers).parse(source)
