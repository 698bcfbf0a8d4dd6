"""Role-based access policy.

``authorize`` is a pure decision; ``ensure_authorized`` turns a deny into a
``ForbiddenError``. Route dependencies and services both go through here so
the rule lives in one place.
"""

from collections.abc import Iterable

from fuel_ledger.exceptions import ForbiddenError
from fuel_ledger.schemas.auth import TokenUser


def authorize(principal: TokenUser, required_roles: Iterable[str]) -> bool:
    """Allow when no role is required or the principal holds one of them."""
    roles = set(required_roles)
    return not roles or principal.role in roles


def ensure_authorized(principal: TokenUser, required_roles: Iterable[str]) -> None:
    if not authorize(principal, required_roles):
        raise ForbiddenError()


def ensure_site_access(principal: TokenUser, site: str) -> None:
    """An operator may only act on the site they are assigned to."""
    if principal.site != site:
        raise ForbiddenError(f"User is not assigned to site {site}")
