"""
API routes

``build_resource_router`` produces the same five operations for every owned
resource; ``users_router`` handles signup and user lookup. Every handler
answers with the ``Envelope`` shape:

    {"success": bool, "message": str, "data": ..., "errors": [str] | null}

Route functions are synchronous; FastAPI runs them in its threadpool so a
blocking MongoDB call only holds its own worker.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from config import Settings
from database import DocumentStore
from schemas import Envelope, UserCreate
from services import OwnedResourceService, ResourceDefinition, UserService

logger = logging.getLogger(__name__)


# ============================================================================
# SHARED HELPERS
# ============================================================================

def respond(
    status_code: int,
    message: str,
    data: Any = None,
    errors: Optional[List[str]] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Wrap a payload in the envelope and serialize it with camelCase keys."""
    envelope = Envelope(
        success=status_code < 400,
        message=message,
        data=jsonable_encoder(data),
        errors=errors,
    )
    return JSONResponse(status_code=status_code, content=envelope.model_dump(), headers=headers)


def server_error(action: str, exc: Exception, settings: Settings) -> JSONResponse:
    """Log an unexpected failure and answer 500.

    The raw exception text is only exposed when debug mode is on.
    """
    logger.exception("Unexpected error while %s", action)
    detail = f"{type(exc).__name__}: {exc}" if settings.debug else "Unexpected server error"
    return respond(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        f"An error occurred while {action}",
        errors=[detail],
    )


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database not connected")
    return store


# ============================================================================
# OWNED RESOURCES
# ============================================================================

def build_resource_router(definition: ResourceDefinition) -> APIRouter:
    """Create the CRUD router for one owned resource.

    Routes (``R`` is ``definition.name``):
    - GET    /api/R?userId=          list records of one owner
    - GET    /api/R/user/{userId}    same, owner in the path
    - GET    /api/R/{id}             one record
    - POST   /api/R                  create, 201 with Location
    - PUT    /api/R/{id}?userId=     partial update, owner only
    - DELETE /api/R/{id}?userId=     delete, owner only
    """
    router = APIRouter(prefix=definition.prefix, tags=[definition.name])
    label = definition.label
    noun = label.lower()
    create_model = definition.create_model
    update_model = definition.update_model

    def get_service(store: DocumentStore = Depends(get_store)) -> OwnedResourceService:
        return OwnedResourceService(store, definition)

    def list_for_owner(user_id: Optional[str], service: OwnedResourceService, settings: Settings):
        if is_blank(user_id):
            return respond(
                status.HTTP_400_BAD_REQUEST,
                "User ID is required",
                errors=["userId parameter cannot be empty"],
            )
        try:
            records = service.list_by_owner(user_id)
        except Exception as e:
            return server_error(f"retrieving {noun} records", e, settings)

        if records:
            message = f"Found {len(records)} {noun} record(s) for this user"
        else:
            message = f"No {noun} records found for this user"
        return respond(status.HTTP_200_OK, message, data=records)

    @router.get("")
    def list_by_query(
        user_id: Optional[str] = Query(None, alias="userId"),
        service: OwnedResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        return list_for_owner(user_id, service, settings)

    @router.get("/user/{user_id}")
    def list_by_path(
        user_id: str,
        service: OwnedResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        return list_for_owner(user_id, service, settings)

    @router.get("/{record_id}")
    def get_by_id(
        record_id: str,
        service: OwnedResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        if is_blank(record_id):
            return respond(status.HTTP_400_BAD_REQUEST, f"{label} ID is required",
                           errors=["ID parameter cannot be empty"])
        try:
            record = service.get_by_id(record_id)
        except Exception as e:
            return server_error(f"retrieving the {noun}", e, settings)

        if record is None:
            return respond(status.HTTP_404_NOT_FOUND, f"{label} not found",
                           errors=[f"No {noun} found with ID: {record_id}"])
        return respond(status.HTTP_200_OK, f"{label} retrieved successfully", data=record)

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create(
        payload: create_model,
        service: OwnedResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        try:
            record = service.create(payload)
        except Exception as e:
            return server_error(f"creating the {noun}", e, settings)

        return respond(
            status.HTTP_201_CREATED,
            f"{label} created successfully",
            data=record,
            headers={"Location": f"{definition.prefix}/{record.id}"},
        )

    def check_owner(record_id: Optional[str], user_id: Optional[str],
                    service: OwnedResourceService) -> Optional[JSONResponse]:
        """Read-before-write: 400 on missing ids, 404 when absent, 403 when owned by someone else."""
        if is_blank(record_id) or is_blank(user_id):
            return respond(
                status.HTTP_400_BAD_REQUEST,
                "Both ID and User ID are required",
                errors=["id and userId parameters cannot be empty"],
            )
        if not service.exists(record_id):
            return respond(status.HTTP_404_NOT_FOUND, f"{label} not found",
                           errors=[f"No {noun} found with ID: {record_id}"])
        if not service.exists_for_owner(record_id, user_id):
            logger.warning("User %s tried to modify %s %s owned by another user",
                           user_id, definition.name, record_id)
            return respond(status.HTTP_403_FORBIDDEN, f"You don't have permission to modify this {noun}",
                           errors=[f"{label} {record_id} does not belong to user {user_id}"])
        return None

    @router.put("/{record_id}")
    def update(
        record_id: str,
        patch: update_model,
        user_id: Optional[str] = Query(None, alias="userId"),
        service: OwnedResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        try:
            rejected = check_owner(record_id, user_id, service)
            if rejected is not None:
                return rejected
            updated = service.update(record_id, user_id, patch)
        except Exception as e:
            return server_error(f"updating the {noun}", e, settings)

        if updated is None:
            # removed or reassigned between the check and the write
            return respond(status.HTTP_404_NOT_FOUND, f"{label} not found or update failed",
                           errors=[f"No {noun} found with ID: {record_id} for user: {user_id}"])
        return respond(status.HTTP_200_OK, f"{label} updated successfully", data=updated)

    @router.delete("/{record_id}")
    def delete(
        record_id: str,
        user_id: Optional[str] = Query(None, alias="userId"),
        service: OwnedResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        try:
            rejected = check_owner(record_id, user_id, service)
            if rejected is not None:
                return rejected
            deleted = service.delete(record_id, user_id)
        except Exception as e:
            return server_error(f"deleting the {noun}", e, settings)

        if not deleted:
            return respond(status.HTTP_404_NOT_FOUND, f"{label} not found",
                           errors=[f"No {noun} found with ID: {record_id}"])
        return respond(status.HTTP_200_OK, f"{label} deleted successfully", data={"deletedId": record_id})

    return router


# ============================================================================
# USERS
# ============================================================================

users_router = APIRouter(prefix="/api/users", tags=["users"])


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)


@users_router.get("")
def list_users(
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    try:
        users = service.list_all()
    except Exception as e:
        return server_error("retrieving users", e, settings)
    return respond(status.HTTP_200_OK, "Users retrieved successfully", data=users)


@users_router.get("/{user_id}")
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    try:
        user = service.get_by_id(user_id)
    except Exception as e:
        return server_error("retrieving the user", e, settings)

    if user is None:
        return respond(status.HTTP_404_NOT_FOUND, "User not found", errors=[f"No user found with ID: {user_id}"])
    return respond(status.HTTP_200_OK, "User retrieved successfully", data=user)


@users_router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    try:
        if service.exists_by_email(payload.email):
            return respond(status.HTTP_409_CONFLICT, "User with this email already exists",
                           errors=[f"Email {payload.email} is already registered"])
        user = service.create(payload)
    except Exception as e:
        return server_error("creating the user", e, settings)

    return respond(
        status.HTTP_201_CREATED,
        "User created successfully",
        data=user,
        headers={"Location": f"/api/users/{user.id}"},
    )


@users_router.delete("/{user_id}")
def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    try:
        deleted = service.delete(user_id)
    except Exception as e:
        return server_error("deleting the user", e, settings)

    if not deleted:
        return respond(status.HTTP_404_NOT_FOUND, "User not found", errors=[f"No user found with ID: {user_id}"])
    return respond(status.HTTP_200_OK, "User deleted successfully", data={"deletedId": user_id})
