import logging
from datetime import datetime, timezone

from fastapi import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt

from core.environment import EnvironmentSettings, get_environment

logger = logging.getLogger(__name__)


class Security():
    """Emissão e validação dos tokens JWT do painel administrativo."""

    def __init__(self, env: EnvironmentSettings = None):
        self._env = env or get_environment()

    def create_token(self, payload: dict) -> str:
        now = datetime.now(timezone.utc).timestamp()
        claims = {
            **payload,
            "type": "access",
            "iat": int(now),
            "exp": int(now) + int(self._env.ACCESS_TOKEN_EXPIRE_SECONDS),
        }
        return jwt.encode(claims, self._env.SECRET_KEY, algorithm=self._env.ALGORITHM)

    def verify_token(self, token: str) -> dict:
        try:
            # Verifica assinatura e expiração (exp)
            decoded = jwt.decode(token, self._env.SECRET_KEY, algorithms=[self._env.ALGORITHM])
        except ExpiredSignatureError:
            logger.warning("Expired token rejected")
            raise HTTPException(401, "Token expired")
        except JWTError as e:
            logger.warning("Invalid token rejected: %s", e)
            raise HTTPException(401, "Invalid token")

        if not decoded.get("id"):
            raise HTTPException(401, "Token missing user identifier")
        return decoded

    def verify_permission(self, token: str, allowed_roles: list) -> dict:
        decoded = self.verify_token(token)
        if decoded.get("role") not in allowed_roles:
            raise HTTPException(403, "Lack of permission")
        return decoded
