"""
User service for authentication
Handles credential lookups against the user profile store
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
import logging

from app.models.user import User
from app.models.role import Role
from app.auth.auth_handler import AuthHandler
from app.utils.error_handler import ConflictError, DatabaseError, ValidationError

logger = logging.getLogger(__name__)

class UserService:
    """Service for user profile operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    def _email_taken(self, email: str) -> bool:
        return self.db.query(User.id).filter(User.email == email).first() is not None

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: str,
        role_name: Optional[str] = None,
        phone: Optional[str] = None,
        is_active: bool = True
    ) -> User:
        """Create a user profile (administrative provisioning)"""
        try:
            if self._email_taken(email):
                raise ConflictError("Email already registered")

            role = None
            if role_name:
                role = self.db.query(Role).filter(Role.name == role_name).first()
                if role is None:
                    raise ValidationError(f"Unknown role: {role_name}")

            db_user = User(
                email=email,
                password_hash=self.auth_handler.get_password_hash(password),
                full_name=full_name,
                phone=phone,
                role_id=role.id if role else None,
                is_active=is_active
            )

            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)

            logger.info(f"Created user profile: {db_user.email}")
            return db_user

        except (ConflictError, ValidationError):
            raise
        except IntegrityError as e:
            # Concurrent provisioning with the same email
            self.db.rollback()
            raise ConflictError("Email already registered", original_error=e)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise DatabaseError(f"Failed to create user profile: {str(e)}", original_error=e)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, or None"""
        try:
            # Exact, case-sensitive match on email
            user = self.db.query(User).filter(User.email == email).first()

            if not user:
                logger.warning(f"Login attempt with non-existent user: {email}")
                return None

            if not user.is_active:
                logger.warning(f"Login attempt with inactive user: {email}")
                return None

            if not self.auth_handler.verify_password(password, user.password_hash):
                logger.warning(f"Failed login attempt for user: {email}")
                return None

            logger.info(f"Successful login for user: {email}")
            return user

        except Exception as e:
            logger.error(f"Authentication error: {e}")
            raise DatabaseError(f"Authentication failed: {str(e)}", original_error=e)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except Exception as e:
            logger.error(f"Failed to get user by ID {user_id}: {e}")
            raise DatabaseError(f"Failed to load user: {str(e)}", original_error=e)
