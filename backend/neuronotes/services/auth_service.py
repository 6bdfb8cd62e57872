"""
NeuroNotes Backend: Authentication Service
==========================================

What:  Signup, the credential callback, and login token issue.
How:   Reads/writes User rows through the request's AsyncSession; hashes and
       verifies passwords off the event loop.
Who:   routes/auth.py and the login/signup pages.

Flows:
    signup:        duplicate check → bcrypt hash → INSERT → redacted user
    authenticate:  (email, password) → User | None
    login:         authenticate → signed access token, or AuthenticationError
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from neuronotes.config import settings
from neuronotes.exceptions import AuthenticationError, DatabaseError, DuplicateUserError
from neuronotes.models.user import User
from neuronotes.schemas.auth import (
    SessionUser,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UserPublic,
)
from neuronotes.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """
    Stateless account operations.

    Error Handling Strategy:
        DuplicateUserError for a taken email (including a lost insert race),
        AuthenticationError for bad credentials, DatabaseError for anything
        the database raises unexpectedly.
    """

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def signup(self, db: AsyncSession, data: SignupRequest) -> SignupResponse:
        """
        Register a new account.

        Raises:
            DuplicateUserError: Email already registered (→ 400)
            DatabaseError: Query or insert failed (→ 500)
        """
        try:
            if await self.get_user_by_email(db, data.email) is not None:
                logger.info("Signup rejected: email already registered")
                raise DuplicateUserError(email=data.email)

            password_hash = await run_in_threadpool(hash_password, data.password)
            user = User(name=data.name, email=data.email, password_hash=password_hash)
            db.add(user)
            await db.flush()

        except DuplicateUserError:
            raise
        except IntegrityError:
            # Unique index on users.email caught a concurrent signup
            await db.rollback()
            logger.info("Signup rejected by unique constraint")
            raise DuplicateUserError(email=data.email)
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User created: %s", user.id)
        return SignupResponse(success=True, user=UserPublic.model_validate(user))

    async def authenticate(
        self, db: AsyncSession, email: str, password: str
    ) -> Optional[User]:
        """
        Credential callback: the user for a matching email/password pair, else None.
        """
        try:
            user = await self.get_user_by_email(db, email)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not verify credentials. Please try again.")

        if user is None:
            return None
        if not await run_in_threadpool(verify_password, password, user.password_hash):
            return None
        return user

    async def login(self, db: AsyncSession, email: str, password: str) -> TokenResponse:
        """
        Verify credentials and issue an access token.

        Raises:
            AuthenticationError: Unknown email or wrong password (→ 401)
        """
        user = await self.authenticate(db, email, password)
        if user is None:
            raise AuthenticationError(message="Invalid email or password")

        token = create_access_token(user.id, user.email, user.name)
        logger.info("User logged in: %s", user.id)
        return TokenResponse(
            access_token=token,
            token_type="bearer",
            expires_in=settings.access_token_expire_minutes * 60,
            user=SessionUser(id=user.id, email=user.email, name=user.name),
        )


auth_service = AuthService()
