"""HTTP API for the todo service.

Routes (all under /api):
- GET  /todo       list all todos
- GET  /todo/{id}  get one todo
- POST /todo       create a todo; the request body is the task text

The OpenAPI document is served at /api/openapi.json with a Swagger UI at
/swagger-ui.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import PoolError, StoreError
from .models import Todo
from .pool import ConnectionPool
from .store import TodoStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["todo"])


def get_store(request: Request) -> TodoStore:
    """Dependency returning the store opened by the app lifespan."""
    return request.app.state.store


@router.get("/todo", response_model=list[Todo])
async def get_todos(store: TodoStore = Depends(get_store)):
    """Gets all todo items"""
    return await store.list_all()


@router.get(
    "/todo/{todo_id}",
    response_model=Todo,
    responses={404: {"description": "Todo not found"}},
)
async def get_todo(todo_id: int, store: TodoStore = Depends(get_store)):
    """Gets the todo item with the specified ID"""
    todo = await store.get(todo_id)
    if todo is None:
        return JSONResponse(
            status_code=404,
            content={"error": f"Todo {todo_id} not found"},
        )
    return todo


@router.post(
    "/todo",
    response_model=Todo,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"text/plain": {"schema": {"type": "string"}}},
        }
    },
)
async def new_todo(request: Request, store: TodoStore = Depends(get_store)):
    """Creates a new todo item with the given description"""
    body = await request.body()
    try:
        task = body.decode("utf-8")
    except UnicodeDecodeError:
        return JSONResponse(
            status_code=400,
            content={"error": "Task must be UTF-8 text"},
        )
    return await store.create(task)


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.exception(f"Storage error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal storage error"})


async def _pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    logger.error(f"No database connection for {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"error": "Database unavailable"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    The connection pool is opened on startup and closed on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pool = ConnectionPool(
            settings.db_path,
            size=settings.pool_size,
            timeout=settings.pool_timeout,
            busy_timeout=settings.busy_timeout,
        )
        await pool.open()
        store = TodoStore(pool)
        try:
            await store.init_schema()
            app.state.store = store
            logger.info(f"Todo service ready (database: {settings.db_path})")
            yield
        finally:
            await pool.close()
            logger.info("Shutting down todo service")

    app = FastAPI(
        title="Todo Service",
        description="SQLite-backed todo list",
        lifespan=lifespan,
        openapi_url="/api/openapi.json",
        docs_url="/swagger-ui",
        redoc_url=None,
    )
    app.include_router(router)
    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(PoolError, _pool_error_handler)
    return app
