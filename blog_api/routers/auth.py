from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.errors import InvalidCredentials, ValidationFailed
from blog_api.schemas import AuthResponse, LoginRequest, RegisterRequest
from blog_api.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    try:
        return await auth_service.register(db, data)
    except IntegrityError as exc:
        # Duplicate username or email; which one is not disclosed.
        raise ValidationFailed("Registration failed") from exc


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await auth_service.authenticate(db, data.email, data.password)
    if result is None:
        raise InvalidCredentials()
    return result
