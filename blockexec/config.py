"""Application configuration with environment variable support"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Block Executor"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Scaffolding
    OUTPUT_DIR: str = "output"  # <OUTPUT_DIR>/<language>/<project name>
    DIRECTIVE_PREFIX: str = "exemd"  # // exemd-name: ..., // exemd-deps: ...
    DEFAULT_FILENAME: str = "main"

    @field_validator('DIRECTIVE_PREFIX', 'DEFAULT_FILENAME')
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Directive prefix and fallback filename must be non-empty"""
        if not v.strip():
            raise ValueError('must not be empty')
        return v.strip()

    # Execution limits
    DEFAULT_TIMEOUT: int = 120  # seconds, toolchains are slow on first run
    MAX_TIMEOUT: int = 600
    INSTALL_TIMEOUT: int = 300
    MAX_CODE_LENGTH: int = 100000  # 100KB
    MAX_OUTPUT_SIZE: int = 65536  # 64KB

    # Same-project builds wait for each other inside one service process
    SERIALIZE_BUILDS: bool = True

    # Toolchain binaries
    GRADLE_BINARY: str = "gradle"
    CARGO_BINARY: str = "cargo"
    PYTHON_BINARY: str = "python3"
    NODE_BINARY: str = "node"
    NPM_BINARY: str = "npm"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get singleton instance of settings"""
    return Settings()
