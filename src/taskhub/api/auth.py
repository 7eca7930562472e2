"""Auth API — registration, login, current user.

- POST /auth/register → create an account, returns a session
- POST /auth/login → email/password → session token
- GET /auth/me → current user info (requires a Bearer token)

Login failures are always 401 "Invalid email or password", whether
or not the account exists.
"""

from fastapi import APIRouter, Depends

from taskhub.api.deps import credential_service
from taskhub.auth.dependencies import Principal, get_current_principal
from taskhub.errors import unwrap
from taskhub.schemas.auth import LoginRequest, RegisterRequest, SessionRead, UserRead
from taskhub.services.credential_service import CredentialService, Session

router = APIRouter(prefix="/auth")


def _session_read(session: Session) -> SessionRead:
    return SessionRead(
        token=session.token,
        expires_in_seconds=session.expires_in_seconds,
        user=UserRead.model_validate(session.user),
    )


@router.post("/register", response_model=SessionRead, status_code=201)
async def register(
    body: RegisterRequest,
    svc: CredentialService = Depends(credential_service),
):
    """Create a new account and log it in."""
    session = unwrap(
        await svc.register(
            email=body.email,
            full_name=body.full_name,
            password=body.password,
            confirm_password=body.confirm_password,
        )
    )
    return _session_read(session)


@router.post("/login", response_model=SessionRead)
async def login(
    body: LoginRequest,
    svc: CredentialService = Depends(credential_service),
):
    """Login with email and password → session token."""
    session = unwrap(await svc.login(body.email, body.password))
    return _session_read(session)


@router.get("/me", response_model=UserRead)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    svc: CredentialService = Depends(credential_service),
):
    """Get the current authenticated user's info."""
    return unwrap(await svc.current_user(principal.user_id))
