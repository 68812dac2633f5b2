"""
Authentication endpoints for staff login and session introspection
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.schemas.user import LoginRequest, LoginData, LoginResponse, CurrentUserResponse, UserResponse
from app.services.user_service import UserService
from app.services.activity_logger import ActivityLogger
from app.auth.auth_handler import auth_handler, get_current_user
from app.utils.error_handler import AuthError, ClinicError, InternalError, ValidationError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")  # Prevent brute force attacks
async def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """Validate credentials and issue a 24 hour session token"""
    if not login_data.email or not login_data.password:
        raise ValidationError("Email and password are required")

    try:
        user_service = UserService(db)
        activity_logger = ActivityLogger(db)

        user = await user_service.authenticate_user(login_data.email, login_data.password)

        if not user:
            await activity_logger.log_request(
                request,
                status_code=401,
                error_message=f"Failed login attempt for: {login_data.email}"
            )
            raise AuthError("Invalid credentials")

        token = auth_handler.create_session_token(user)

        await activity_logger.log_request(request, status_code=200, user_id=user.id)

        return LoginResponse(
            success=True,
            message="Authentication successful",
            data=LoginData(user=UserResponse.from_orm(user), token=token)
        )

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}")
        raise InternalError("Internal server error", original_error=e)

@router.get("/me", response_model=CurrentUserResponse)
@limiter.limit("30/minute")
async def get_current_user_info(
    request: Request,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return the profile behind a valid session token"""
    user_service = UserService(db)
    user = await user_service.get_user_by_id(current_user["user_id"])

    if not user or not user.is_active:
        raise AuthError("Session no longer valid")

    return CurrentUserResponse(success=True, data=UserResponse.from_orm(user))
