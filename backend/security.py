"""Password hashing and bearer tokens."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from backend.errors import InvalidToken
from backend.models import User, is_storable_id


class PasswordHasher:
    def __init__(self):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        return self._context.hash(password)

    def verify_password(self, plain_password: str, password_hash: str) -> bool:
        return self._context.verify(plain_password, password_hash)


class TokenIssuer:
    """
    Mints and checks signed JWT bearer tokens.

    Tokens are stateless: a token is valid while its signature checks out and
    its exp claim lies in the future. The subject is the user id.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidToken("Could not validate credentials") from e

        sub = payload.get("sub")
        try:
            user_id = int(sub)
        except (TypeError, ValueError):
            raise InvalidToken("Could not validate credentials")
        if not is_storable_id(user_id):
            raise InvalidToken("Could not validate credentials")
        return user_id
