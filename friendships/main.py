import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from friendships.core.config import settings
from friendships.core.errors import FriendshipError, InvalidTransition, NotFound, StorageUnavailable
from friendships.api.friendship_request import router as friendship_request_router
from friendships.api.my_friend import router as my_friend_router

from .api import health_router

log = logging.getLogger("friendships")
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

ERROR_STATUS = {
    NotFound: 404,
    InvalidTransition: 400,
    StorageUnavailable: 503,
}

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FriendshipError)
async def friendship_error_handler(request: Request, exc: FriendshipError):
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code == 500:
        log.error("Unhandled %s on %s: %s", exc.kind, request.url.path, exc.message)
    headers = {"Retry-After": "1"} if isinstance(exc, StorageUnavailable) else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind},
        headers=headers,
    )


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def storage_error_handler(request: Request, exc: Exception):
    log.error("Storage failure on %s: %s", request.url.path, exc)
    return await friendship_error_handler(
        request, StorageUnavailable("Storage temporarily unavailable, please retry")
    )


app.include_router(friendship_request_router)
app.include_router(my_friend_router)
app.include_router(health_router.router)
