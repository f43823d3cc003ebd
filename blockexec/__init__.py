"""Run code blocks by scaffolding a project around them and invoking their toolchain"""

__version__ = "1.0.0"
