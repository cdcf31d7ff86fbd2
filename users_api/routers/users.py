import json
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as SchemaError

from .. import schemas
from ..deps import get_store
from ..store import StoreError, UserNotFound, UserStore
from ..validation import ValidationError, validate_create, validate_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

INVALID_PAYLOAD = "Invalid request payload"
NOT_FOUND = "User not found"

# Column(Integer) is 32-bit on PostgreSQL; larger ids can never exist.
MAX_USER_ID = 2**31 - 1


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _server_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)


def _json_body(schema) -> dict:
    return {
        "requestBody": {
            "content": {"application/json": {"schema": schema.model_json_schema()}},
            "required": True,
        }
    }


async def _read_payload(request: Request, schema):
    """Decode the JSON body into ``schema`` regardless of Content-Type."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise _bad_request(INVALID_PAYLOAD)

    try:
        return schema.model_validate(payload)
    except SchemaError:
        raise _bad_request(INVALID_PAYLOAD)


@router.get("", response_model=List[schemas.UserOut])
def list_users(store: UserStore = Depends(get_store)):
    """Return all users."""
    try:
        return store.list_all()
    except StoreError:
        raise _server_error("Failed to retrieve users")


@router.post(
    "",
    response_model=schemas.UserOut,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": schemas.ErrorOut}, 500: {"model": schemas.ErrorOut}},
    openapi_extra=_json_body(schemas.UserCreate),
)
async def create_user(request: Request, store: UserStore = Depends(get_store)):
    user_in = await _read_payload(request, schemas.UserCreate)
    try:
        validate_create(user_in.name, user_in.email)
    except ValidationError as exc:
        raise _bad_request(exc.message)

    try:
        user = await run_in_threadpool(store.insert, user_in.name, user_in.email)
    except StoreError:
        raise _server_error("Failed to create user")

    logger.info("Created user %s", user.id)
    return user


@router.get(
    "/{user_id}",
    response_model=schemas.UserOut,
    responses={404: {"model": schemas.ErrorOut}},
)
def get_user(
    user_id: int = Path(..., ge=1, le=MAX_USER_ID),
    store: UserStore = Depends(get_store),
):
    try:
        return store.get_by_id(user_id)
    except UserNotFound:
        raise _not_found()
    except StoreError:
        raise _server_error("Failed to retrieve user")


@router.put(
    "/{user_id}",
    response_model=schemas.UserOut,
    responses={
        400: {"model": schemas.ErrorOut},
        404: {"model": schemas.ErrorOut},
        500: {"model": schemas.ErrorOut},
    },
    openapi_extra=_json_body(schemas.UserUpdate),
)
async def update_user(
    request: Request,
    user_id: int = Path(..., ge=1, le=MAX_USER_ID),
    store: UserStore = Depends(get_store),
):
    """Update name and/or email of an existing user.

    The user is looked up before the body is read, so an unknown id is
    reported as 404 even when the payload is also broken.
    """
    try:
        await run_in_threadpool(store.get_by_id, user_id)
    except UserNotFound:
        raise _not_found()
    except StoreError:
        raise _server_error("Failed to retrieve user")

    user_in = await _read_payload(request, schemas.UserUpdate)
    try:
        validate_update(user_in.name, user_in.email)
    except ValidationError as exc:
        raise _bad_request(exc.message)

    try:
        user = await run_in_threadpool(
            store.update, user_id, name=user_in.name, email=user_in.email
        )
    except UserNotFound:
        # Deleted between the lookup and the save.
        raise _not_found()
    except StoreError:
        raise _server_error("Failed to update user")

    logger.info("Updated user %s", user_id)
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": schemas.ErrorOut}},
)
def delete_user(
    user_id: int = Path(..., ge=1, le=MAX_USER_ID),
    store: UserStore = Depends(get_store),
):
    """Delete a user.

    Returns 204 on success, 404 if the user does not exist (including one
    that was already deleted).
    """
    try:
        store.delete_by_id(user_id)
    except UserNotFound:
        raise _not_found()
    except StoreError:
        raise _server_error("Failed to delete user")

    logger.info("Deleted user %s", user_id)
    # 204 → empty response body
    return None
