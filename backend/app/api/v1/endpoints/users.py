from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Any
from fastapi.security import OAuth2PasswordRequestForm
from app.api import deps
from app.core.exceptions import InvalidInputError, UnauthenticatedError
from app.core.security import get_password_hash, verify_password, create_access_token
from app.schemas.user import UserCreate, UserResponse, Token
from app.models.user import User

router = APIRouter()

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    *,
    db: Session = Depends(deps.get_db),
    user_in: UserCreate,
) -> Any:
    """
    Crear un nuevo usuario.
    """
    email = user_in.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise InvalidInputError("El correo electrónico ya está registrado")

    user_data = user_in.model_dump(exclude={"password"})
    user_data["email"] = email
    user_data["hashed_password"] = get_password_hash(user_in.password)
    db_user = User(**user_data)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    return db_user

@router.post("/login", response_model=Token)
def login(
    db: Session = Depends(deps.get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    Obtener token de acceso para futuras peticiones.
    """
    user = db.query(User).filter(User.email == form_data.username.lower()).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise UnauthenticatedError("Email o contraseña incorrectos")

    if not user.is_active:
        raise InvalidInputError("Usuario inactivo")

    access_token = create_access_token(data={"sub": user.id, "role": user.role})

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user_id": user.id,
        "role": user.role,
    }

@router.get("/me", response_model=UserResponse)
def get_current_user(
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Obtener información del usuario autenticado.
    """
    return current_user
