"""FastAPI dependencies for staff and customer authentication."""

from typing import Annotated

from fastapi import Header, HTTPException

from food_delivery_ledger.auth.staff_key_validator import StaffKeyValidator
from food_delivery_ledger.models.identity_models import StaffIdentity, StaffRole


def get_staff_identity_from_header(
    x_api_key: Annotated[str | None, Header()] = None,
    validator: StaffKeyValidator | None = None,
    allowed_roles: frozenset[StaffRole] = frozenset(StaffRole),
) -> StaffIdentity:
    """Validate the X-API-Key header and return the staff member it belongs to.

    Args:
        x_api_key: API key from X-API-Key header (injected by FastAPI)
        validator: StaffKeyValidator holding the configured keys
        allowed_roles: Roles permitted on the endpoint

    Returns:
        StaffIdentity: The caller's id and role

    Raises:
        HTTPException: 401 if the key is missing or unknown, 403 if its role
            is not allowed here
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    identity = validator.identity_for(x_api_key) if validator else None
    if identity is None:
        raise HTTPException(status_code=401, detail="Invalid API key")

    if identity.role not in allowed_roles:
        raise HTTPException(
            status_code=403, detail=f"Not permitted for {identity.role.value} accounts"
        )

    return identity


def get_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Args:
        authorization: Raw header value

    Returns:
        The token, or None if the header is absent or not a bearer token
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    return token.strip()
