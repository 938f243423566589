"""
Role-based access gate.

``require_role`` never raises: it returns either ``Granted`` or an
``AccessDenied`` value and callers branch on the result. Admin services return
the ``AccessDenied`` unchanged before touching storage, and endpoints turn it
into a redirect to the home page plus a warning notice.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Union


class Role(str, Enum):
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"


@dataclass(frozen=True)
class Principal:
    """The actor behind a request. Anonymous visitors have no id and no roles."""

    user_id: Optional[int] = None
    email: Optional[str] = None
    roles: FrozenSet[Role] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls()

    @classmethod
    def from_role_names(
        cls, user_id: int, email: str, role_names: Iterable[str]
    ) -> "Principal":
        roles = frozenset(Role(name) for name in role_names if name in _ROLE_NAMES)
        return cls(user_id=user_id, email=email, roles=roles)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def has_role(self, role: Role) -> bool:
        return role in self.roles


_ROLE_NAMES = {role.value for role in Role}


@dataclass(frozen=True)
class Granted:
    principal: Principal


@dataclass(frozen=True)
class AccessDenied:
    principal: Principal
    required: Role

    @property
    def message(self) -> str:
        if self.required == Role.ADMIN:
            return "This part of the site is reserved for administrators"
        return "You must be signed in to access this page"


AccessResult = Union[Granted, AccessDenied]


def require_role(principal: Principal, role: Role) -> AccessResult:
    """Check that ``principal`` holds ``role``."""
    if principal.has_role(role):
        return Granted(principal)
    return AccessDenied(principal=principal, required=role)
