"""REST API of the optical store.

``create_app(storage)`` builds the FastAPI application. The storage object is
injected (memory or SQL) and kept on ``app.state.storage``; no module level
store exists.

Routes, generated for every entry of ``RESOURCES``:

- GET    /api/<resource>              list
- GET    /api/<resource>/{id}         one record (404 if absent)
- POST   /api/<resource>              create (201)
- PUT    /api/<resource>/{id}         partial update
- PATCH  /api/<resource>/{id}         partial update
- DELETE /api/<resource>/{id}         delete (204)
- GET    /api/<order>/{id}/items      line items of one order

Plus ``GET /api/dashboard`` and ``GET /health``.

Every error body is ``{"error": "<message>"}``. Storage failures are logged
and answered with a generic 500; their details never reach the client.

Handlers are ``async def`` and call the storage on the event loop, so requests
are served one at a time. With the SQL backend each query blocks the loop
until it returns.
"""
import time
from typing import Any, Dict, Optional, Type

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException

from config.business_config import BusinessConfig, business_config
from database.errors import ConflictError, StorageError
from database.interfaces import EntityStore, Storage
from database.schemas import INT_MAX, INT_MIN
from .resources import RESOURCES, RESOURCES_BY_PATH, Resource


def _to_json(record: BaseModel) -> Dict[str, Any]:
    """Serialise a record with camelCase keys (excluded fields dropped)."""
    return record.model_dump(mode="json", by_alias=True)


def _parse_id(raw: str, resource: Resource) -> int:
    """Path ids must be integers within the 32-bit id column range."""
    try:
        value = int(raw)
    except ValueError:
        value = None
    if value is None or not INT_MIN <= value <= INT_MAX:
        raise HTTPException(status_code=400,
                            detail=f"Invalid {resource.label.lower()} id")
    return value


async def _read_body(request: Request, resource: Resource,
                     model: Type[BaseModel]) -> BaseModel:
    """Parse and validate a JSON object body.

    Raises:
        HTTPException: 400 when the body is not a JSON object or fails the
            schema.
    """
    invalid = HTTPException(status_code=400,
                            detail=f"Invalid {resource.label.lower()} data")
    try:
        payload = await request.json()
    except ValueError:
        raise invalid
    if not isinstance(payload, dict):
        raise invalid
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"{resource.store}: rejected body: {e.errors()}")
        raise invalid


def _conflict(resource: Resource, field: str, value: Any) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"{resource.label} with {to_camel(field)} '{value}' already exists",
    )


def _check_unique(store: EntityStore, resource: Resource, values: Dict[str, Any],
                  exclude_id: Optional[int] = None) -> None:
    """Reject values of unique fields already held by another record."""
    for field in resource.unique_fields:
        value = values.get(field)
        if value is None:
            continue
        existing = store.find_by(field, value)
        if existing is not None and existing.id != exclude_id:
            raise _conflict(resource, field, value)


def _backstop_conflict(resource: Resource, values: Dict[str, Any]) -> HTTPException:
    """409 for a constraint violation the pre-check did not see."""
    for field in resource.unique_fields:
        if values.get(field) is not None:
            return _conflict(resource, field, values[field])
    return HTTPException(status_code=409,
                         detail=f"{resource.label} already exists")


def _add_resource_routes(app: FastAPI, resource: Resource) -> None:
    """Register the CRUD routes of one resource."""
    url = resource.url
    not_found = f"{resource.label} not found"

    def _store(request: Request) -> EntityStore:
        return request.app.state.storage.store(resource.store)

    @app.get(url, name=f"{resource.store}_list")
    async def list_records(request: Request):
        return [_to_json(r) for r in _store(request).list()]

    @app.get(url + "/{record_id}", name=f"{resource.store}_get")
    async def get_record(record_id: str, request: Request):
        record = _store(request).get(_parse_id(record_id, resource))
        if record is None:
            raise HTTPException(status_code=404, detail=not_found)
        return _to_json(record)

    @app.post(url, status_code=201, name=f"{resource.store}_create")
    async def create_record(request: Request):
        data = await _read_body(request, resource, resource.create_model)
        store = _store(request)
        values = data.model_dump()
        _check_unique(store, resource, values)
        try:
            record = store.create(data)
        except ConflictError:
            raise _backstop_conflict(resource, values)
        logger.info(f"{resource.store}: created #{record.id}")
        return JSONResponse(status_code=201, content=_to_json(record))

    async def update_record(record_id: str, request: Request):
        record_id = _parse_id(record_id, resource)
        patch = await _read_body(request, resource, resource.patch_model)
        store = _store(request)
        if store.get(record_id) is None:
            raise HTTPException(status_code=404, detail=not_found)
        changes = patch.changes()
        _check_unique(store, resource, changes, exclude_id=record_id)
        try:
            record = store.update(record_id, patch)
        except ConflictError:
            raise _backstop_conflict(resource, changes)
        if record is None:
            raise HTTPException(status_code=404, detail=not_found)
        return _to_json(record)

    app.add_api_route(url + "/{record_id}", update_record, methods=["PUT"],
                      name=f"{resource.store}_replace")
    app.add_api_route(url + "/{record_id}", update_record, methods=["PATCH"],
                      name=f"{resource.store}_update")

    @app.delete(url + "/{record_id}", status_code=204,
                name=f"{resource.store}_delete")
    async def delete_record(record_id: str, request: Request):
        if not _store(request).delete(_parse_id(record_id, resource)):
            raise HTTPException(status_code=404, detail=not_found)
        logger.info(f"{resource.store}: deleted #{record_id}")
        return Response(status_code=204)

    if resource.items:
        items = RESOURCES_BY_PATH[resource.items]

        @app.get(url + "/{record_id}/items", name=f"{resource.store}_items")
        async def list_items(record_id: str, request: Request):
            parent_id = _parse_id(record_id, resource)
            item_store = request.app.state.storage.store(items.store)
            return [_to_json(r) for r in item_store.list_for_parent(parent_id)]


def create_app(storage: Storage,
               config: Optional[BusinessConfig] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        storage: Storage backing every route.
        config: Business profile, used for the API title (optional).

    Returns:
        The configured application.
    """
    config = config or business_config
    app = FastAPI(
        title=config.get_store_name(),
        description="Point of sale and inventory API for an optical store",
        version="1.0.0",
    )
    app.state.storage = storage

    # ==================== Middleware ====================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        line = (f"{request.method} {request.url.path} | "
                f"Status: {response.status_code} | Time: {elapsed:.3f}s")
        if response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)
        return response

    # ==================== Error handlers ====================

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code,
                            content={"error": exc.detail},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request,
                                       exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"{request.method} {request.url.path}: storage error: {exc}")
        return JSONResponse(status_code=500,
                            content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path}: unhandled error")
        return JSONResponse(status_code=500,
                            content={"error": "Internal server error"})

    # ==================== Routes ====================

    @app.get("/api/dashboard")
    async def dashboard():
        """Dashboard aggregate, computed fresh on every request."""
        return _to_json(app.state.storage.dashboard_summary())

    for resource in RESOURCES:
        _add_resource_routes(app, resource)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "storage": app.state.storage.backend}

    return app
