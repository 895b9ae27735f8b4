import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException

from domain.users.user import User
from repositories.user import UserRepository
from utils.security import Security

logger = logging.getLogger(__name__)


class AuthService():
    def __init__(self,
                 repository: UserRepository,
                 security: Security) -> None:
        self._repository = repository
        self._security = security

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        data = await self._repository.find_by_email(email)
        if not data:
            return None

        user = User.from_dict(data)
        if not user.password_matches(password):
            return None
        return user

    async def login(self, email: Optional[str], password: Optional[str]) -> dict:
        if not email or not password:
            raise HTTPException(status_code=400, detail="Email and password are required")

        user = await self.authenticate(email, password)
        if not user:
            logger.warning("Failed login attempt for %s", email)
            raise HTTPException(status_code=401, detail="Invalid credentials")

        user.last_login = await self._repository.touch_last_login(user._id)
        token = self._security.create_token({
            "id": str(user._id),
            "email": user.email,
            "role": user.role.value,
        })

        logger.info("User logged in: %s", email)
        return {
            "message": "Login successful",
            "token": token,
            "user": user.to_public_dict(),
        }

    async def create_user(self, data: dict) -> dict:
        exists = await self._repository.find_by_email(data["email"])
        if exists:
            # 409 Conflict é o mais adequado para duplicidade
            raise HTTPException(status_code=409, detail="User with this email already exists.")

        user = User(**data, created_at=datetime.now(timezone.utc))
        user._id = await self._repository.save(user.to_dict())
        logger.info("User created: %s (%s)", user.email, user.role.value)
        return user.to_public_dict()
