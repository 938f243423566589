import logging
from typing import Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gazette.core.access import AccessDenied, Role, Principal, require_role
from gazette.core.database import utcnow
from gazette.core.errors import NotFound, ValidationError
from gazette.core.passwords import (
    PASSWORD_TOO_LONG,
    fits_bcrypt,
    hash_password,
    verify_password,
)
from gazette.models.user import User
from gazette.repositories import UserRepository
from gazette.schemas.user import User as UserSchema

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, db: Session):
        self.users = UserRepository(db)

    def register(self, email: str, password: str) -> UserSchema:
        """Create a regular (non-admin) account."""
        email = email.strip().lower()
        if self.users.find_by_email(email) is not None:
            raise ValidationError.for_field("email", "This email is already registered")
        if not fits_bcrypt(password):
            raise ValidationError.for_field("password", PASSWORD_TOO_LONG)

        now = utcnow()
        user = User(
            email=email,
            roles=[Role.USER.value],
            password_hash=hash_password(password),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.users.persist(user)
        try:
            self.users.flush()
        except IntegrityError:
            # Registered concurrently between the lookup and the commit
            raise ValidationError.for_field("email", "This email is already registered")
        logger.info(f"Registered user {user.id}")
        return UserSchema.model_validate(user)

    def authenticate(self, email: str, password: str) -> Optional[UserSchema]:
        """Return the account for valid credentials, None otherwise."""
        user = self.users.find_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None

        user.last_login = utcnow()
        self.users.persist(user)
        self.users.flush()
        return UserSchema.model_validate(user)

    def change_password(
        self, actor: Principal, current_password: str, new_password: str
    ) -> Union[UserSchema, AccessDenied]:
        gate = require_role(actor, Role.USER)
        if isinstance(gate, AccessDenied):
            return gate

        user = self.users.find_one_by_id(actor.user_id)
        if user is None:
            raise NotFound("User", actor.user_id)
        if not verify_password(current_password, user.password_hash):
            raise ValidationError.for_field(
                "current_password", "The current password is incorrect"
            )
        if not fits_bcrypt(new_password):
            raise ValidationError.for_field("new_password", PASSWORD_TOO_LONG)

        user.password_hash = hash_password(new_password)
        user.updated_at = utcnow()
        self.users.persist(user)
        self.users.flush()
        return UserSchema.model_validate(user)

    def grant_admin(self, email: str) -> UserSchema:
        user = self.users.find_by_email(email)
        if user is None:
            raise NotFound("User", email)

        roles = set(user.roles or [])
        roles.update({Role.USER.value, Role.ADMIN.value})
        # Reassign so the JSON column is flagged dirty
        user.roles = sorted(roles)
        self.users.persist(user)
        self.users.flush()
        logger.info(f"Granted admin role to user {user.id}")
        return UserSchema.model_validate(user)
