"""
Authentication service for registration, login and token management.
"""

from app.core.config import get_logger
from app.core.exceptions import AuthenticationError, BadRequestError, InvalidTokenError
from app.core.security import hash_password_async, verify_password_async
from app.core.token import TokenAuthority
from app.data_layer.dl_exception import DuplicateObjectError
from app.data_layer.data_obj_mgr import DataObjectManager
from app.model.auth import Actor, AuthResponse, TokenPair
from app.model.enums import Role
from app.model.user import User, UserInDB, UserRegister

logger = get_logger("auth")


class AuthService:
    """Service for authentication operations."""

    def __init__(self, database: DataObjectManager, token_authority: TokenAuthority):
        self.users = database.users
        self.tokens = token_authority

    def _auth_response(self, user: UserInDB) -> AuthResponse:
        pair = self.tokens.issue_tokens(user)
        return AuthResponse(
            user=User.model_validate(user),
            token=pair.token,
            refresh_token=pair.refresh_token,
        )

    async def register(self, user_in: UserRegister) -> AuthResponse:
        """
        Create a USER account and log it in.

        Raises:
            BadRequestError: if the email is already registered
        """
        email = user_in.email.lower()
        if await self.users.get_by_email(email) is not None:
            raise BadRequestError("User with this email already exists")

        password_hash = await hash_password_async(user_in.password)
        try:
            user = await self.users.add(
                obj_in={
                    "email": email,
                    "first_name": user_in.first_name,
                    "last_name": user_in.last_name,
                    "password_hash": password_hash,
                    "role": Role.USER,
                    "is_active": True,
                }
            )
        except DuplicateObjectError as exc:
            # registered concurrently since the check above
            raise BadRequestError("User with this email already exists") from exc
        logger.info(f"registered user id={user.id}")
        return self._auth_response(user)

    async def authenticate_user(self, email: str, password: str) -> UserInDB:
        """
        Check credentials, the same error is raised whatever the reason.

        Raises:
            AuthenticationError: unknown email, wrong password or inactive account
        """
        user = await self.users.get_by_email(email.lower())
        if user is None or not await verify_password_async(password, user.password_hash):
            logger.warning("login failed: bad credentials")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            logger.warning(f"login failed: user id={user.id} is inactive")
            raise AuthenticationError("Invalid email or password")
        return user

    async def login(self, email: str, password: str) -> AuthResponse:
        user = await self.authenticate_user(email, password)
        logger.info(f"login user id={user.id}")
        return self._auth_response(user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        return await self.tokens.refresh(refresh_token)

    async def logout(self, actor: Actor) -> None:
        # tokens are stateless, they stay valid until they expire
        logger.info(f"logout user id={actor.id}")

    async def authenticate(self, token: str) -> Actor:
        """
        Turn a bearer token into the acting identity.

        The user must still exist and be active; the role comes from the token,
        so a role change applies once the client refreshes.

        Raises:
            InvalidTokenError: missing or bad token, or its user is gone / inactive
        """
        if not token:
            raise InvalidTokenError("Access token is required")
        claims = self.tokens.verify(token)

        user = await self.users.get(claims.user_id)
        if user is None:
            raise InvalidTokenError("User no longer exists")
        if not user.is_active:
            raise InvalidTokenError("User account is inactive")
        return Actor.from_claims(claims)
