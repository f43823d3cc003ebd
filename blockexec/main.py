"""FastAPI application - Main entry point"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import List
import time

from blockexec.schemas import (
    ExecuteRequest, ExecuteResponse, ParseRequest, DescriptorResponse, LanguageInfo
)
from blockexec.core.service import service
from blockexec.core.exceptions import (
    BlockExecException, ValidationError, ExecutionError, UnknownLanguageError
)
from blockexec.config import get_settings
from blockexec.executors import CompiledLangExecutor, ExecutorFactory, ExecutorRegistry

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Runs code blocks in their native toolchain",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    print(
        f"{request.method} {request.url.path} - "
        f"{response.status_code} - {duration:.3f}s"
    )

    return response


def _error_response(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": str(exc),
            "stdout": "",
            "stderr": str(exc),
            "exit_code": -1,
            "execution_time": 0.0,
            "command": "",
            "project_dir": ""
        }
    )


# Exception handlers
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Snippet rejected before running"""
    return _error_response(400, "Validation failed", exc)


@app.exception_handler(UnknownLanguageError)
async def unknown_language_handler(request: Request, exc: UnknownLanguageError):
    return _error_response(400, "Unknown language", exc)


@app.exception_handler(ExecutionError)
async def execution_error_handler(request: Request, exc: ExecutionError):
    """Toolchain could not be started or dependencies not installed"""
    return _error_response(500, "Execution failed", exc)


@app.exception_handler(BlockExecException)
async def build_error_handler(request: Request, exc: BlockExecException):
    """Scaffolding or manifest failures"""
    return _error_response(500, "Build failed", exc)


# API Routes
@app.post("/execute", response_model=ExecuteResponse, tags=["Execution"])
async def execute_code(request: ExecuteRequest):
    """
    Build and run a code block

    Metadata directives in the leading comments control the project:

    ```
    // exemd-name: joda
    // exemd-filename: HelloWorld
    // exemd-deps: joda-time:joda-time;version=2.2
    ```

    The response carries the toolchain's stdout/stderr and exit code.
    """
    try:
        result = await service.execute_snippet(
            language=request.language,
            code=request.code,
            timeout=request.timeout
        )
        return ExecuteResponse(**result)

    except BlockExecException:
        # Handled by the exception handlers
        raise

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Unexpected error: {str(e)}"
        )


@app.post("/parse", response_model=DescriptorResponse, tags=["Execution"])
async def parse_metadata(request: ParseRequest):
    """
    Parse the metadata directives of a code block without building it
    """
    descriptor = service.parse(request.language, request.code)
    return DescriptorResponse(
        language=ExecutorRegistry.resolve(request.language),
        name=descriptor.name,
        filename=descriptor.entry_filename(settings.DEFAULT_FILENAME),
        dependencies=[dep.model_dump() for dep in descriptor.dependencies],
        skipped_directives=list(descriptor.skipped_directives),
    )


@app.get("/languages", response_model=List[LanguageInfo], tags=["Info"])
async def list_languages():
    """Registered languages and whether their toolchain is installed"""
    languages = []
    for language in ExecutorRegistry.list_providers():
        executor = ExecutorFactory.create_executor(language, "")
        languages.append(LanguageInfo(
            language=language,
            aliases=ExecutorRegistry.aliases_for(language),
            compiled=isinstance(executor, CompiledLangExecutor),
            toolchain_available=executor.toolchain_available(),
        ))
    return languages


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint

    **Example Response:**
    ```json
    {
        "status": "healthy",
        "version": "1.0.0",
        "toolchains": {"java": true, "javascript": false, "python": true, "rust": false}
    }
    ```
    """
    health = service.health_check()

    return {
        "status": "healthy" if health["overall"] else "degraded",
        "version": settings.VERSION,
        "output_dir": settings.OUTPUT_DIR,
        "toolchains": health["toolchains"]
    }


@app.get("/", tags=["Info"])
async def root():
    """
    Root endpoint with service information
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running",
        "endpoints": {
            "execute": "POST /execute",
            "parse": "POST /parse",
            "languages": "GET /languages",
            "health": "GET /health",
            "docs": "GET /docs",
            "redoc": "GET /redoc"
        },
        "description": "Runs code blocks in their native toolchain"
    }


# Startup event
@app.on_event("startup")
async def startup():
    """Run startup checks"""
    print(f"🚀 {settings.APP_NAME} v{settings.VERSION} starting...")
    print(f"   Output directory: {settings.OUTPUT_DIR}")

    toolchains = service.health_check()["toolchains"]
    for language, available in toolchains.items():
        if available:
            print(f"✅ {language}: toolchain found")
        else:
            print(f"⚠️  {language}: toolchain missing, /execute will fail for this language")

    print(f"📡 API available at http://{settings.HOST}:{settings.PORT}")
    print(f"📚 Documentation at http://{settings.HOST}:{settings.PORT}/docs")


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    print(f"🛑 {settings.APP_NAME} shutting down...")


# Run with: uvicorn blockexec.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "blockexec.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
