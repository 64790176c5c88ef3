from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from medbook.auth import jwt_handler
from medbook.booking.enums import UserRole
from medbook.booking.errors import ValidationError
from medbook.booking.policy import Actor, parse_role
from medbook.database import get_db
from medbook.models.user import User

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except Exception as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token subject")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    try:
        role = parse_role(user.role)
    except ValidationError as exc:
        raise HTTPException(status_code=403, detail="Unknown user role") from exc
    return Actor(id=user.id, role=role)


def get_optional_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Actor | None:
    # Anonymous callers are allowed; a token that is present must still be valid.
    if credentials is None:
        return None
    return get_current_actor(get_current_user(credentials, db))


def require_role(*roles: UserRole):
    allowed = frozenset(roles)

    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            names = ", ".join(sorted(role.value for role in allowed))
            raise HTTPException(status_code=403, detail=f"Requires role: {names}")
        return actor

    return dependency
