"""Custom exceptions for the block executor"""


class BlockExecException(Exception):
    """Base exception for all block executor errors"""
    pass


class MetadataError(BlockExecException):
    """Raised when a metadata directive is malformed

    Recoverable: the parser skips the offending directive.
    """
    pass


class ScaffoldError(BlockExecException):
    """Raised when the project directory or a file cannot be written"""
    pass


class ManifestError(BlockExecException):
    """Raised when a build manifest cannot be rendered"""
    pass


class ValidationError(BlockExecException):
    """Raised when a snippet fails pre-flight validation"""
    pass


class ExecutionError(BlockExecException):
    """Raised when a snippet cannot be handed to its toolchain"""
    pass


class UnknownLanguageError(ExecutionError):
    """Raised when no backend is registered for a language"""
    pass


class ToolchainNotFoundError(ExecutionError):
    """Raised when a toolchain binary is not on PATH"""
    pass


class DependencyInstallError(ExecutionError):
    """Raised when installing declared dependencies fails"""
    pass
