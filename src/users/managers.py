"""Manager for Conduit accounts: creation plus bcrypt hashing and verification."""

import uuid

import bcrypt
from django.contrib.auth.base_user import BaseUserManager


class UserManager(BaseUserManager):
    """Creates authors with bcrypt password hashes; there are no staff or superusers."""

    use_in_migrations = True

    def create_user(self, email: str, username: str, password: str | None = None, **extra_fields):
        """Create a user with a normalized email and a bcrypt-hashed password."""
        if not email:
            raise ValueError("Users must have an email address")
        if not username:
            raise ValueError("Users must have a username")
        if password is None:
            raise ValueError("Users must have a password")
        user = self.model(id=uuid.uuid4(), email=self.normalize_email(email), username=username, **extra_fields)
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """Hash a raw password using bcrypt and return the utf-8 string."""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(raw_password.encode(), salt)
        return hashed.decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Check ``raw_password`` against the stored hash (bcrypt compares in constant time)."""

        if not user.password_hash:
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode("utf-8"))


__all__ = ["UserManager"]
