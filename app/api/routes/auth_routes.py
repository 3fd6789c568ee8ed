"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from app.db.database import get_db_session
from app.core.auth import hash_password, verify_password, create_access_token, get_current_user
from app.core.logging_config import get_logger
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    After registration, login to get an access token.
    """
    async with get_db_session() as db:
        # Check email exists
        result = await db.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": request.email}
        )
        if result.fetchone():
            raise HTTPException(status_code=409, detail="The provided email already exists in the system.")

        await db.execute(
            text("INSERT INTO users (email, password_hash) VALUES (:email, :password_hash)"),
            {"email": request.email, "password_hash": hash_password(request.password)}
        )

    logger.info(f"Registered user {request.email}")
    return MessageResponse(message="Registered successfully. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    async with get_db_session() as db:
        result = await db.execute(
            text("SELECT user_id, password_hash, is_active FROM users WHERE email = :email"),
            {"email": request.email}
        )
        user = result.fetchone()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user_id, password_hash, is_active = user

    if not is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not verify_password(request.password, password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"sub": str(user_id)})

    return TokenResponse(access_token=token, user_id=user_id)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    async with get_db_session() as db:
        result = await db.execute(
            text("SELECT user_id, email, is_active, created_at FROM users WHERE user_id = :id"),
            {"id": user["user_id"]}
        )
        row = result.fetchone()

    return UserResponse(
        user_id=row[0], email=row[1], is_active=bool(row[2]), created_at=row[3]
    )
