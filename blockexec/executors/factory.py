"""Executor factory with registry pattern

Language backends register themselves with the @ExecutorRegistry.register
decorator. The factory looks them up by language identifier or alias.

Example:
    @ExecutorRegistry.register("kotlin", aliases=("kt",))
    class KotlinExecutor(CompiledLangExecutor):
        pass
"""

from pathlib import Path
from typing import Dict, List, Tuple, Type, Union

from blockexec.executors.base import LangExecutor
from blockexec.config import get_settings
from blockexec.core.exceptions import UnknownLanguageError


class ExecutorRegistry:
    """
    Self-registering executor registry

    Maps language identifiers (and their aliases) to executor classes.
    """

    _registry: Dict[str, Type[LangExecutor]] = {}
    _aliases: Dict[str, str] = {}

    @classmethod
    def register(cls, language: str, aliases: Tuple[str, ...] = ()):
        """
        Decorator to register a language executor

        Args:
            language: Canonical language identifier (e.g., "java")
            aliases: Other names accepted for the language (e.g., "py")
        """
        def decorator(executor_class: Type[LangExecutor]):
            if language in cls._registry:
                print(f"⚠️  Warning: Overwriting executor for language '{language}'")

            cls._registry[language] = executor_class
            for alias in aliases:
                cls._aliases[alias] = language
            return executor_class

        return decorator

    @classmethod
    def resolve(cls, language: str) -> str:
        """Map an alias to its canonical language identifier"""
        key = language.strip().lower()
        return cls._aliases.get(key, key)

    @classmethod
    def get(cls, language: str) -> Type[LangExecutor]:
        """
        Get executor class by language identifier or alias

        Raises:
            UnknownLanguageError: If no executor handles the language
        """
        canonical = cls.resolve(language)
        if canonical not in cls._registry:
            available = ', '.join(cls.list_providers()) or 'none'
            raise UnknownLanguageError(
                f"Unknown language '{language}'. "
                f"Available languages: {available}"
            )

        return cls._registry[canonical]

    @classmethod
    def list_providers(cls) -> List[str]:
        """Get sorted list of registered languages"""
        return sorted(cls._registry.keys())

    @classmethod
    def aliases_for(cls, language: str) -> List[str]:
        return sorted(alias for alias, target in cls._aliases.items() if target == language)


class ExecutorFactory:
    """
    Factory for creating executor instances

    Executors hold the state of a single build, so every snippet gets a
    fresh instance.

    Example:
        executor = ExecutorFactory.create_executor("java", source)
        handle = executor.execute()
        result = handle.output(timeout=120)
    """

    @classmethod
    def create_executor(cls, language: str, source: str,
                        output_dir: Union[str, Path, None] = None) -> LangExecutor:
        """
        Create executor instance for a snippet

        Args:
            language: Language identifier or alias
            source: Snippet source text
            output_dir: Base output directory, defaults to settings.OUTPUT_DIR

        Raises:
            UnknownLanguageError: If the language is not registered
        """
        settings = get_settings()
        executor_class = ExecutorRegistry.get(language)
        return executor_class(source, output_dir=output_dir, settings=settings)


def get_executor(language: str, source: str,
                 output_dir: Union[str, Path, None] = None) -> LangExecutor:
    """
    Get executor instance (convenience function)

    Example:
        from blockexec.executors import get_executor

        handle = get_executor("java", source).execute()
    """
    return ExecutorFactory.create_executor(language, source, output_dir)
