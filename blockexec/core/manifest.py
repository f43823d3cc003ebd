"""Build manifest rendering"""

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, StrictUndefined, TemplateError

from blockexec.core.exceptions import ManifestError
from blockexec.core.scaffold import Scaffolder

# Manifests are whitespace sensitive: keep the final newline, no autoescape
_env = Environment(
    autoescape=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


class ManifestTemplate:
    """
    A build manifest with named substitution slots

    Rendering is pure; writing goes through a Scaffolder so it follows the
    same overwrite and error rules as source files.
    """

    def __init__(self, filename: str, source: str):
        self.filename = filename
        try:
            self._template = _env.from_string(source)
        except TemplateError as e:
            raise ManifestError(f"Invalid template for {filename}: {e}") from e

    def render(self, **context: Any) -> str:
        """Render the manifest text"""
        try:
            return self._template.render(**context)
        except TemplateError as e:
            raise ManifestError(f"Failed to render {self.filename}: {e}") from e

    def write(self, text: str, root_dir: Path,
              scaffolder: Optional[Scaffolder] = None) -> Path:
        """Write rendered text to <root_dir>/<filename>"""
        scaffolder = scaffolder or Scaffolder()
        return scaffolder.write_file(text, Path(root_dir) / self.filename)


GRADLE_TEMPLATE = ManifestTemplate("build.gradle", """\
apply plugin: 'java'
apply plugin: 'application'

repositories {
    mavenCentral()
}

dependencies {
{% for dep in dependencies %}{{ verb }} "{{ dep.name }}:{{ dep.version }}"
{% endfor %}}

{{ entrypoint_key }} = '{{ entrypoint }}'{% if named %}
{% endif %}""")


CARGO_TEMPLATE = ManifestTemplate("Cargo.toml", """\
[package]
name = "{{ package }}"
version = "0.1.0"
edition = "2021"

[[bin]]
name = "{{ binary }}"
path = "{{ binary_path }}"

[dependencies]
{% for dep in dependencies %}{{ dep.name }} = "{{ dep.version }}"
{% endfor %}""")


REQUIREMENTS_TEMPLATE = ManifestTemplate("requirements.txt", """\
{% for dep in dependencies %}{{ dep.name }}=={{ dep.version }}
{% endfor %}""")


PACKAGE_JSON_TEMPLATE = ManifestTemplate("package.json", """\
{
  "name": {{ package | tojson }},
  "version": "1.0.0",
  "private": true,
  "main": {{ main | tojson }},
  "dependencies": {
{% for dep in dependencies %}    {{ dep.name | tojson }}: {{ dep.version | tojson }}{% if not loop.last %},{% endif %}
{% endfor %}  }
}
""")
