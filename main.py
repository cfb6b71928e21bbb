import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from collecta.config import config
from collecta.db import Base
from collecta.db.session import engine
from collecta.errors import CollectaError
from collecta.routers import register_routers
from collecta.utils.forms import format_validation_error

logger = logging.getLogger("collecta")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@contextlib.asynccontextmanager
async def lifespan(_app: FastAPI):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    config.STORAGE_PATH.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Collecta Hub API ready")
    yield
    await engine.dispose()


app = FastAPI(title="Collecta Hub API", lifespan=lifespan)


@app.exception_handler(CollectaError)
async def collecta_error_handler(_request: Request, exc: CollectaError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    return error_response(status.HTTP_400_BAD_REQUEST, format_validation_error(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed."
    return error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


register_routers(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=config.FASTAPI_HOST, port=config.FASTAPI_PORT)
