# dayflow_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Optional, Set

from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from dayflow_api.common.http import fail
from dayflow_api.extensions import db
from dayflow_api.models.user import User
from dayflow_api.models.security import Role, UserRole, ROLE_ADMIN


# ---------- helpers ----------

def _collect_roles_from_db(user_id: int) -> Set[str]:
    q = (
        db.session.query(Role.code)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .distinct()
    )
    return {row[0] for row in q.all()}


def current_user_id() -> Optional[int]:
    uid = get_jwt_identity()
    try:
        return int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None


def current_roles() -> Set[str]:
    """Roles from the JWT 'roles' claim, or from the DB when the token carries none."""
    claims = get_jwt() or {}
    roles = set(claims.get("roles") or [])
    if not roles:
        uid = current_user_id()
        roles = _collect_roles_from_db(uid) if uid else set()
    return roles


def current_company_id() -> Optional[int]:
    """Company scope from the JWT 'company_id' claim, falling back to the user's row."""
    claims = get_jwt() or {}
    cid = claims.get("company_id")
    if cid is not None:
        try:
            return int(cid)
        except (TypeError, ValueError):
            return None
    uid = current_user_id()
    user = db.session.get(User, uid) if uid else None
    return user.company_id if user else None


def current_employee_id() -> Optional[int]:
    uid = current_user_id()
    user = db.session.get(User, uid) if uid else None
    return user.employee_id if user else None


# ---------- decorators ----------

def requires_roles(*codes: str):
    """
    Require that the current user has AT LEAST ONE of the given role codes
    and belongs to a company.
    - Uses roles in JWT if present; falls back to DB.
    - 'admin' role always passes.
    - No codes means any authenticated company user.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            uid = current_user_id()
            if uid is None:
                return fail("Unauthorized", status=401)

            if current_company_id() is None:
                return fail("User is not attached to a company", status=403)

            roles = current_roles()
            if ROLE_ADMIN in roles or not codes:
                return fn(*args, **kwargs)

            if not any(r in roles for r in codes):
                return fail("Forbidden", status=403)

            return fn(*args, **kwargs)
        return inner
    return outer
