import logging
import traceback
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, status
from starlette.requests import Request
from starlette.responses import JSONResponse

from blockwatch import __version__
from blockwatch.api.addresses import router as addresses_router
from blockwatch.api.blocks import router as blocks_router
from blockwatch.api.deps import get_parser
from blockwatch.container import Container
from blockwatch.exceptions import ParserNotRunningError, StorageError
from blockwatch.parser import Parser

logger = logging.getLogger("blockwatch.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    parser = container.parser()
    parser.run()
    yield
    await parser.stop()
    await container.http_client().close()


app = FastAPI(title="Blockwatch", version=__version__, lifespan=lifespan)


@app.exception_handler(ParserNotRunningError)
async def not_running_handler(request: Request, exc: ParserNotRunningError):
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.include_router(addresses_router)
app.include_router(blocks_router)


@app.get("/api/health")
def health(parser: Annotated[Parser, Depends(get_parser)]):
    return {"status": "ok", "version": __version__, "running": parser.is_running}
