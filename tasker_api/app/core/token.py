""" Issue, verify and refresh the signed bearer tokens. """
import datetime as dt
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

import jwt
from pydantic import ValidationError

from app.core.config import Settings, get_logger
from app.core.exceptions import InvalidTokenError
from app.model.auth import TokenClaims, TokenPair
from app.model.enums import Role

logger = get_logger("token")


class TokenSubject(Protocol):
    id: int
    email: str
    role: Role
    is_active: bool


UserFinder = Callable[[int], Awaitable[Optional[TokenSubject]]]


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class TokenAuthority:
    """Mints and validates HS256 tokens carrying {userId, email, role}.

    Stateless: access and refresh tokens share the claim shape and differ only in
    expiry. There is no revocation list, a role change reaches the client on the
    next refresh.
    """

    def __init__(
        self,
        secret: str,
        *,
        find_user_by_id: Optional[UserFinder] = None,
        algorithm: str = "HS256",
        access_ttl: dt.timedelta = dt.timedelta(hours=24),
        refresh_ttl: dt.timedelta = dt.timedelta(days=7),
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self._secret = secret
        self._find_user_by_id = find_user_by_id
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, find_user_by_id: Optional[UserFinder] = None
    ) -> "TokenAuthority":
        return cls(
            settings.JWT_SECRET,
            find_user_by_id=find_user_by_id,
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=dt.timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
            refresh_ttl=dt.timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _encode(self, user: TokenSubject, ttl: dt.timedelta) -> str:
        now = self._clock()
        payload: Dict[str, Any] = TokenClaims(
            user_id=user.id, email=user.email, role=user.role
        ).to_claims()
        payload["iat"] = now
        payload["exp"] = now + ttl
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_access_token(self, user: TokenSubject) -> str:
        return self._encode(user, self.access_ttl)

    def issue_refresh_token(self, user: TokenSubject) -> str:
        return self._encode(user, self.refresh_ttl)

    def issue_tokens(self, user: TokenSubject) -> TokenPair:
        return TokenPair(
            token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user),
        )

    def verify(self, token: str) -> TokenClaims:
        """Decode a token checking signature and expiry.

        Any failure (empty, malformed, wrong secret, expired, unexpected claims)
        raises InvalidTokenError with the same message.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
            return TokenClaims.model_validate(payload)
        except (jwt.PyJWTError, ValidationError) as exc:
            logger.info(f"token rejected: {type(exc).__name__}")
            raise InvalidTokenError() from exc

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Reissue both tokens from the current user record.

        Fails with InvalidTokenError if the token does not verify or the user no
        longer exists or is inactive.
        """
        if self._find_user_by_id is None:
            raise RuntimeError("TokenAuthority.refresh needs a find_user_by_id lookup")
        try:
            claims = self.verify(refresh_token)
        except InvalidTokenError as exc:
            raise InvalidTokenError("Invalid refresh token") from exc

        user = await self._find_user_by_id(claims.user_id)
        if user is None or not user.is_active:
            logger.warning(f"refresh refused, user {claims.user_id} not available")
            raise InvalidTokenError("Invalid refresh token")
        return self.issue_tokens(user)
