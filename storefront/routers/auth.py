# storefront/routers/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from storefront.clients.base import FunctionsApi
from storefront.clients.deps import get_functions_api
from storefront.core.auth import Identity, require_auth
from storefront.core.session_cart import get_session_cart, SessionCart
from storefront.database import get_session
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import LoginRequest, RegisterRequest, TokenResponse
from storefront.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()


def get_auth_service(api: FunctionsApi = Depends(get_functions_api)) -> AuthService:
    return AuthService(repo, api)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Register a new account and sign in.

    - Username must be unused; password is stored hashed.
    - The customer record is created through the gateway (best effort).
    """
    return service.register(session, payload)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Exchange username/password for a bearer token.
    """
    return service.login(session, payload)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, cart: SessionCart = Depends(get_session_cart)):
    """
    Drop the session (and with it the cart). Tokens are stateless and
    simply expire.
    """
    cart.clear()
    request.session.clear()
    return None


@router.get("/me")
def who_am_i(identity: Identity = Depends(require_auth)):
    return {
        "username": identity.username,
        "role": identity.role,
        "customerId": identity.customer_id,
    }
