from typing import List
import uuid

from fastapi import APIRouter

from kitflow.api.deps import DB, AdminUser, CurrentUser
from kitflow.schemas.auth import CurrentRoleResponse, UserResponse, UserRoleUpdate
from kitflow.schemas.base import DeleteResponse
from kitflow.services.auth_service import AuthService


router = APIRouter(tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(db: DB, admin: AdminUser):
    """List all users. Admin only."""
    return await AuthService(db).list_users()


@router.get("/me/role", response_model=CurrentRoleResponse)
async def get_current_role(current_user: CurrentUser):
    """Role of the signed-in user."""
    return CurrentRoleResponse(role=current_user.role)


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: uuid.UUID,
    data: UserRoleUpdate,
    db: DB,
    admin: AdminUser,
):
    """Change a user's role. Admins cannot demote themselves."""
    return await AuthService(db).update_role(admin, user_id, data.role)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(user_id: uuid.UUID, db: DB, admin: AdminUser):
    """Delete a user. Admins cannot delete themselves."""
    await AuthService(db).delete_user(admin, user_id)
    return DeleteResponse(id=user_id)
