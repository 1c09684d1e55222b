import logging
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from parkpass.auth.dependencies import get_current_user, require_super_admin
from parkpass.auth.schemas import (
    Actor, AdminRole, AdminUser, AdminUserCreate, AdminUserUpdate, AuthResponse, LoginRequest
)
from parkpass.auth.service import AdminUserService
from parkpass.auth.utils import create_access_token
from parkpass.config import settings
from parkpass.database import get_db
from parkpass.models import AdminUser as AdminUserModel

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Admin login; returns a bearer token"""
    user = AdminUserService.authenticate(db, login_data.email, login_data.password)
    if not user:
        logger.warning("Failed login for %s", login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role, "parks": user.assigned_park_ids},
        expires_delta=access_token_expires
    )
    logger.info("User %s logged in as %s", user.id, user.role)
    return AuthResponse(
        access_token=access_token,
        token_type="bearer",
        user=user
    )

@router.get("/me", response_model=AdminUser)
def read_users_me(current_user: AdminUserModel = Depends(get_current_user)):
    """Get current user profile"""
    return current_user

# User management (super-admin)
@router.get("/users", response_model=List[AdminUser])
def list_users(
    role: Optional[AdminRole] = Query(None, description="Filter by role"),
    _: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    return AdminUserService.get_users(db, role=role.value if role else None)

@router.post("/users", response_model=AdminUser, status_code=status.HTTP_201_CREATED)
def create_user(
    user: AdminUserCreate,
    _: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Create an admin, park-admin or ticket-checker account"""
    try:
        return AdminUserService.create_user(db=db, user=user)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.put("/users/{user_id}", response_model=AdminUser)
def update_user(
    user_id: int,
    user_update: AdminUserUpdate,
    _: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    try:
        updated_user = AdminUserService.update_user(db=db, user_id=user_id, user_update=user_update)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not updated_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return updated_user

@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    actor: Actor = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    if user_id == actor.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )
    if not AdminUserService.delete_user(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return {"message": "User deleted successfully"}
