from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel

from core.dependencies import get_auth_service
from domain.users.user import Role
from services.auth_service import AuthService
from utils.auth import require_admin


# --- Schemas ---
class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserCreate(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    role: Role = Role.USER


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", status_code=status.HTTP_200_OK)
async def login(
    credentials: LoginRequest = Body(...),
    service: AuthService = Depends(get_auth_service)
):
    """
    Realiza login e retorna token JWT.
    """
    return await service.login(credentials.email, credentials.password)


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate = Body(...),
    admin: dict = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    """
    Cria um novo usuário do painel. Apenas administradores.
    """
    created = await service.create_user(user.model_dump())
    return {"message": "User created successfully", "user": created}
