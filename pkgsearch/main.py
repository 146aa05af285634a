import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pkgsearch.api.search import router as search_router
from pkgsearch.core.dependencies import get_index_provider, get_settings
from pkgsearch.domain.errors import PackageSearchError

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Optionally warm up the index at startup and release it on shutdown.
    """
    settings = get_settings()
    if settings.eager_init:
        await get_index_provider().warm_up()
    yield
    get_index_provider().close()


app = FastAPI(
    title="Package name search",
    version="0.1.0",
    description="Ranked substring search over a read-only package index snapshot.",
    lifespan=lifespan,
    redirect_slashes=False,
)


@app.exception_handler(PackageSearchError)
async def package_search_error_handler(request: Request, exc: PackageSearchError) -> JSONResponse:
    """
    Render domain errors as a short reason; details stay in the logs.
    """
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.reason}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.reason}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.reason})


app.include_router(search_router, tags=["search"])


if __name__ == "__main__":
    """
    Allow running `python -m pkgsearch.main` to start the Uvicorn development server.
    """
    import uvicorn

    uvicorn.run(
        "pkgsearch.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )
