"""Dependencies for FastAPI - Identität und Rollen aus der Session"""
from dataclasses import dataclass, field
from typing import Callable, FrozenSet

from fastapi import Depends, HTTPException, Request, status

from nss_hours.exceptions import PermissionDenied

ROLE_ADMIN = "admin"
ROLE_PROGRAM_OFFICER = "program_officer"

# Rollen, die Anwesenheit und Freigaben ändern dürfen
STAFF_ROLES = (ROLE_ADMIN, ROLE_PROGRAM_OFFICER)


@dataclass(frozen=True)
class Identity:
    """Aktueller Akteur, wie ihn der externe Identitäts-Provider liefert"""
    volunteer_id: int
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def has_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


def get_current_identity(request: Request) -> Identity:
    """
    Holt die Identität aus der Session.

    Der Login selbst liegt außerhalb dieser Anwendung, er hinterlegt
    'volunteer_id' und 'roles' in der Session.

    Raises:
        HTTPException (401): Wenn keine Identität in der Session gesetzt ist
    """
    volunteer_id = request.session.get("volunteer_id")
    if not volunteer_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Nicht angemeldet."
        )
    roles = request.session.get("roles") or []
    return Identity(volunteer_id=int(volunteer_id), roles=frozenset(roles))


def require_roles(*roles: str) -> Callable[..., Identity]:
    """
    Dependency-Factory: lässt nur Identitäten mit einer der Rollen durch.

    Usage:
        @router.post("/{participation_id}/approve")
        def approve(..., identity: Identity = Depends(require_roles(ROLE_ADMIN))):
    """
    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not identity.has_role(*roles):
            raise PermissionDenied(f"Benötigte Rolle: {' oder '.join(roles)}")
        return identity

    return dependency
