from typing import Optional
from dataclasses import dataclass, asdict, fields
from datetime import datetime
import bcrypt
import re
from enum import Enum


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    email: str = None
    password: str = None
    role: Role = Role.USER
    name: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    _id: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.role, str):
            self.role = Role(self.role)
        # Ensure password is hashed
        if self.password and not self.is_bcrypt_hash(self.password):
            self.password = self.hash_password(self.password)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Monta o usuário a partir do documento do Mongo, ignorando campos extras."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    # Password helpers
    def password_matches(self, password: str) -> bool:
        """Verify if the provided password matches the stored hashed password."""
        if not self.password or not password:
            return False
        return bcrypt.checkpw(password.encode('utf-8'), self.password.encode('utf-8'))

    def is_bcrypt_hash(self, s: str) -> bool:
        return bool(re.match(r'^\$2[aby]\$\d{2}\$.{53}$', s))

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self):
        data = asdict(self)

        # Remove _id if None to allow MongoDB to generate it
        if data.get("_id") is None:
            del data["_id"]

        data["role"] = self.role.value
        return data

    def to_public_dict(self):
        """Dados seguros para devolver ao cliente (sem senha)."""
        data = self.to_dict()
        data.pop("password", None)
        _id = data.pop("_id", None)
        if _id:
            data["id"] = str(_id)
        return data
