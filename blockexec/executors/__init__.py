"""Language executors

Importing this package registers every built-in language backend.
"""

from blockexec.executors.base import CompiledLangExecutor, ExecutorState, LangExecutor
from blockexec.executors.factory import ExecutorFactory, ExecutorRegistry, get_executor
from blockexec.executors.java import JavaExecutor
from blockexec.executors.javascript import JavaScriptExecutor
from blockexec.executors.python import PythonExecutor
from blockexec.executors.rust import RustExecutor

__all__ = [
    "LangExecutor",
    "CompiledLangExecutor",
    "ExecutorState",
    "ExecutorRegistry",
    "ExecutorFactory",
    "get_executor",
    "JavaExecutor",
    "JavaScriptExecutor",
    "PythonExecutor",
    "RustExecutor",
]
