"""FastAPI application entry point."""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from compressor import __version__
from compressor.api.routes import router
from compressor.compression.errors import CompressionError, EncodingError
from compressor.config import CORS_ORIGINS, logger as config_logger

logging.getLogger("uvicorn").setLevel(logging.INFO)


def error_body(exc: CompressionError) -> dict:
    body = {
        "success": False,
        "error": exc.message,
        "error_type": exc.error_type,
        "timestamp": int(time.time() * 1000),
    }
    if isinstance(exc, EncodingError) and exc.diagnostics:
        body["details"] = exc.diagnostics
    return body


async def compression_error_handler(_: Request, exc: CompressionError) -> JSONResponse:
    """Render any pipeline error as the JSON error body."""
    if exc.status_code >= 500:
        config_logger.error("Request failed (%s): %s", exc.error_type, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


@asynccontextmanager
async def lifespan(app: FastAPI):
    config_logger.info("Compressor API started")
    yield
    config_logger.info("Compressor API shutting down")


app = FastAPI(
    title="FFmpeg File Compressor API",
    description="Compress videos and images with ffmpeg and download the result.",
    version=__version__,
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(CompressionError, compression_error_handler)
app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    from compressor.config import HOST, PORT
    uvicorn.run("compressor.main:app", host=HOST, port=PORT, reload=True)
