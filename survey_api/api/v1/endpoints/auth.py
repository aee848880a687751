# survey_api/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException

from survey_api.core.security import create_access_token, get_current_user
from survey_api.models.user import User
from survey_api.schemas.auth import LoginIn, MeOut, TokenOut
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.users import authenticate

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
def login(data: LoginIn, store: SurveyStore = Depends(get_store)):
    """
    Login por email y contraseña. Devuelve un JWT con el id y el rol del usuario.
    """
    with store.transaction():
        user = authenticate(store, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Email o contraseña inválidos")

    token = create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "company_id": str(user.company_id) if user.company_id else None,
    })
    return TokenOut(access_token=token, user=MeOut.model_validate(user))


@router.get("/me", response_model=MeOut)
def me(current_user: User = Depends(get_current_user)):
    """
    Devuelve el usuario actual según el token.
    """
    return MeOut.model_validate(current_user)
