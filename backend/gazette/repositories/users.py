from typing import Optional
from gazette.models.user import User
from gazette.repositories.base import Repository


class UserRepository(Repository[User]):
    model = User

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email.strip().lower())
