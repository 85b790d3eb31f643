"""Session materialization and role enrichment.

``enrich_session`` is the one place a session learns its user's id and role:
both are copied from the persisted user record, never from client input.
"""

import copy
from collections.abc import Mapping
from enum import Enum
from typing import Any

from src.sf_gateway.auth.jwt_handler import SessionClaims


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def enrich_session(session: dict[str, Any], persisted_user: Any | None) -> dict[str, Any]:
    """Return a copy of *session* with ``user.id`` and ``user.role`` from *persisted_user*.

    *persisted_user* may be an ORM row or a plain mapping. When it is None the
    session comes back unchanged. No id or role is ever invented.
    """
    if persisted_user is None:
        return session

    enriched = copy.deepcopy(session)
    user = dict(enriched.get("user") or {})
    user_id = _field(persisted_user, "id")
    user["id"] = str(user_id) if user_id is not None else None
    user["role"] = _plain(_field(persisted_user, "role"))
    enriched["user"] = user
    return enriched


def build_session(claims: SessionClaims, persisted_user: Any | None) -> dict[str, Any]:
    """Materialize the outgoing session for a verified token.

    Display fields come from the token; id and role come from the database
    row through enrich_session.
    """
    session: dict[str, Any] = {
        "user": {
            "name": claims.name,
            "email": claims.email,
        },
    }
    return enrich_session(session, persisted_user)
