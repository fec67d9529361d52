from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.dependencies import get_account_service
from ...core.exceptions import AuthenticationFailed
from ...domain.models import Account
from ...services.account_service import AccountService

_bearer_scheme = HTTPBearer(auto_error=False)


def require_account(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    account_service: AccountService = Depends(get_account_service),
) -> Account:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationFailed()
    return account_service.resolve_token(credentials.credentials)
