"""Pydantic models for request/response validation"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List


class ParseRequest(BaseModel):
    """Request to parse snippet metadata"""

    language: str = Field(
        ...,
        description="Language identifier or alias (java, rust, python, javascript, ...)",
        min_length=1
    )
    code: str = Field(
        ...,
        description="Snippet source, metadata directives in the leading comments"
    )


class ExecuteRequest(ParseRequest):
    """Request to build and run a snippet"""

    timeout: Optional[int] = Field(
        default=None,
        ge=1,
        le=600,
        description="Maximum toolchain run time in seconds"
    )

    @field_validator('code')
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        """Validate code is not empty"""
        if not v.strip():
            raise ValueError('Code cannot be empty')
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "language": "java",
                    "code": (
                        "// exemd-name: hello\n"
                        "package hello;\n\n"
                        "public class main {\n"
                        "    public static void main(String[] args) {\n"
                        "        System.out.println(\"Hello, World!\");\n"
                        "    }\n"
                        "}\n"
                    ),
                    "timeout": 120
                }
            ]
        }
    }


class ExecuteResponse(BaseModel):
    """Response with execution result"""

    success: bool = Field(
        ...,
        description="Whether the toolchain exited with code 0 in time"
    )
    stdout: str = Field(
        ...,
        description="Standard output of the toolchain process"
    )
    stderr: str = Field(
        ...,
        description="Standard error of the toolchain process"
    )
    exit_code: int = Field(
        ...,
        description="Exit code of the toolchain process (0 = success)"
    )
    execution_time: float = Field(
        ...,
        description="Build and run time in seconds"
    )
    error: Optional[str] = Field(
        None,
        description="Error message if execution failed"
    )
    command: str = Field(
        "",
        description="Equivalent command line that was run"
    )
    project_dir: str = Field(
        "",
        description="Scaffolded project directory"
    )


class DependencyModel(BaseModel):
    name: str
    version: str


class DescriptorResponse(BaseModel):
    """Parsed snippet metadata"""

    language: str
    name: str = Field(..., description="Project/package name, empty when unnamed")
    filename: str = Field(..., description="Source filename without extension")
    dependencies: List[DependencyModel] = Field(default_factory=list)
    skipped_directives: List[str] = Field(
        default_factory=list,
        description="Malformed directives that were ignored"
    )


class LanguageInfo(BaseModel):
    language: str
    aliases: List[str]
    compiled: bool
    toolchain_available: bool
