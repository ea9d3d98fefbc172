"""
Users routes.

| Method | Path          | Success                         | Failure                            |
| ------ | ------------- | ------------------------------- | ---------------------------------- |
| GET    | /users        | 200, list of users              | 500 (StorageError)                 |
| POST   | /signup       | 201, Location, created user     | 409 / 500 plain text (SignupError) |
| GET    | /users/{id}   | 200, user                       | 404 (NotFoundError), 422, 500      |
| DELETE | /users/{id}   | 204                             | 404 when nothing removed, 422, 500 |

Failures are raised by the service and rendered by the handlers in error_handlers.py.
"""

import logging

from fastapi import APIRouter, Depends, Path, Response, status
from fastapi.responses import JSONResponse

from user_service.core.dependencies import get_user_service
from user_service.schemas.user import UserCreate, UserRead
from user_service.services.user_service import UserService, user_location

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

# Ids are signed 64-bit (BIGINT); anything outside is rejected with 422 before
# reaching the driver, which cannot bind it.
MIN_USER_ID = -(2**63)
MAX_USER_ID = 2**63 - 1


@router.get("/users", response_model=list[UserRead])
async def list_users(service: UserService = Depends(get_user_service)):
    return await service.list_users()


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=UserRead,
    responses={409: {"description": "Duplicate username or email"}},
)
async def signup_user(payload: UserCreate, service: UserService = Depends(get_user_service)):
    user = await service.signup(payload)
    body = UserRead.model_validate(user)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=body.model_dump(),
        headers={"Location": user_location(user.id)},
    )


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int = Path(ge=MIN_USER_ID, le=MAX_USER_ID),
    service: UserService = Depends(get_user_service),
):
    return await service.get_user(user_id)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int = Path(ge=MIN_USER_ID, le=MAX_USER_ID),
    service: UserService = Depends(get_user_service),
) -> Response:
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
