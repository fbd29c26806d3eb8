import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from backend.errors import DuplicateEmail, InvalidCredentials, InvalidToken, UserNotFound
from backend.models import User
from backend.security import PasswordHasher, TokenIssuer
from backend.stores import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    token: str
    email: str
    name: str


class AuthService:
    def __init__(self, users: UserStore, hasher: PasswordHasher, tokens: TokenIssuer):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    def register(self, name: str, email: str, password: str) -> AuthResult:
        if self.users.exists(email):
            raise DuplicateEmail("Email already exists")

        user = User(name=name, email=email, password_hash=self.hasher.hash_password(password))
        try:
            self.users.save(user)
        except IntegrityError as e:
            # another request registered the same email after our check
            raise DuplicateEmail("Email already exists") from e

        logger.info("Registered user id=%s", user.id)
        return AuthResult(token=self.tokens.issue(user), email=user.email, name=user.name)

    def authenticate(self, email: str, password: str) -> None:
        user = self.users.find_by_email(email)
        if user is None or not self.hasher.verify_password(password, user.password_hash):
            logger.info("Rejected login attempt")
            raise InvalidCredentials("Invalid email or password")

    def login(self, email: str, password: str) -> AuthResult:
        self.authenticate(email, password)

        user = self.users.find_by_email(email)
        if user is None:
            raise UserNotFound(f"User not found: {email}")

        logger.info("User id=%s logged in", user.id)
        return AuthResult(token=self.tokens.issue(user), email=user.email, name=user.name)

    def resolve_user(self, token: str) -> User:
        user_id = self.tokens.decode(token)
        user = self.users.get(user_id)
        if user is None:
            raise InvalidToken("Could not validate credentials")
        return user
