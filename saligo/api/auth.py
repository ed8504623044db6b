import secrets
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from saligo.config import Settings

security = HTTPBasic()


def verify_basic_auth(credentials: HTTPBasicCredentials, settings: Settings) -> bool:
    """Verify basic auth credentials without raising exceptions."""
    is_correct_username = secrets.compare_digest(
        credentials.username.encode(), settings.auth_username.encode()
    )
    is_correct_password = secrets.compare_digest(
        credentials.password.encode(), settings.auth_password.encode()
    )
    return is_correct_username and is_correct_password


def get_credentials_verifier(settings: Settings) -> Callable[..., str]:
    """Create a dependency that checks basic auth against the configured credentials."""

    def verify_credentials(credentials: HTTPBasicCredentials = Depends(security)) -> str:  # noqa: B008
        if not verify_basic_auth(credentials, settings):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect username or password",
                headers={"WWW-Authenticate": "Basic"},
            )
        return credentials.username

    return verify_credentials
