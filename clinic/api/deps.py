from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List

from ..core.database import get_db, get_redis
from ..core.security import (
    security, verify_token, AuthenticationError,
    AuthorizationError, UserRole, TokenPayload
)
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import User
from ..repositories.doctor_repository import DoctorRepository
from ..repositories.patient_repository import PatientRepository
from ..scheduling.results import BookingResult, BookingStatus

RATE_LIMIT_REQUESTS = 10
RATE_LIMIT_WINDOW_SECONDS = 3600

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    if not token_payload.sub:
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == token_payload.sub).first()
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return current_user

    return role_checker

async def get_admin_user(
    current_user: User = Depends(require_role([UserRole.ADMIN]))
) -> User:
    """Require admin role."""
    return current_user

async def get_current_doctor(
    current_user: User = Depends(require_role([UserRole.DOCTOR])),
    db: Session = Depends(get_db)
) -> Doctor:
    """Resolve the caller to their doctor profile."""
    doctor = DoctorRepository(db).get_by_user_id(current_user.id)
    if not doctor:
        raise AuthorizationError("No doctor profile for this account")
    return doctor

async def get_current_patient(
    current_user: User = Depends(require_role([UserRole.PATIENT])),
    db: Session = Depends(get_db)
) -> Patient:
    """Resolve the caller to their patient profile."""
    patient = PatientRepository(db).get_by_user_id(current_user.id)
    if not patient:
        raise AuthorizationError("No patient profile for this account")
    return patient

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for registration endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= RATE_LIMIT_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)

# Booking result to HTTP status
RESULT_STATUS_CODES = {
    BookingStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookingStatus.CONFLICT: status.HTTP_409_CONFLICT,
    BookingStatus.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    BookingStatus.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    BookingStatus.ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

def raise_for_result(result: BookingResult) -> BookingResult:
    """Turn a failed booking result into the matching HTTP error."""
    if not result.ok:
        raise HTTPException(
            status_code=RESULT_STATUS_CODES[result.status],
            detail=result.message
        )
    return result
