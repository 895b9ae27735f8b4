import logging
from typing import List

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.dependencies import get_security
from utils.security import Security

# Logger para este módulo
logger = logging.getLogger(__name__)

security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    token_auth: HTTPAuthorizationCredentials = Depends(security_scheme),
    security: Security = Depends(get_security)
) -> dict:
    """
    Dependência para rotas HTTP/REST.
    Lança 401 se o token estiver ausente ou inválido.
    """
    if not token_auth or not token_auth.credentials:
        logger.warning("Token de autenticação ausente")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return security.verify_token(token_auth.credentials)


class PermissionChecker:
    """Factory de dependências RBAC: libera apenas os papéis informados."""

    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = allowed_roles

    async def __call__(self, user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") not in self.allowed_roles:
            logger.warning(
                "Acesso negado; user_id=%s, role=%s, required=%s",
                user.get("id"), user.get("role"), self.allowed_roles
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required"
            )
        return user


require_admin = PermissionChecker(["admin"])
