from __future__ import annotations

from flask import current_app, request
from flask.views import MethodView
from flask_login import current_user

from .errors import BadRequest, Forbidden, Unauthorized
from .models import GLOBAL_SCOPE


def is_admin_user() -> bool:
    return current_user.is_authenticated and getattr(current_user, "is_admin", False)


def request_data() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def resolve_scope() -> str:
    """
    Scope for the current request: `family_code` from the query string (or the
    JSON body for writes), else the caller's own scope. Single-tenant apps
    always use the global scope.
    """
    if not current_app.config.get("SANTA_MULTI_TENANT", True):
        return GLOBAL_SCOPE

    code = request.args.get("family_code")
    if not code and request.method in {"POST", "PUT", "PATCH"}:
        code = request_data().get("family_code")
    if not code and current_user.is_authenticated:
        code = getattr(current_user, "scope", None)

    code = (str(code) if code is not None else "").strip()
    if not code:
        raise BadRequest("family_code is required")

    if current_user.is_authenticated and not is_admin_user() and code != current_user.scope:
        raise Forbidden()
    return code


class LoginRequiredMixin(MethodView):
    def dispatch_request(self, *args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        return super().dispatch_request(*args, **kwargs)


class AdminRequiredMixin(LoginRequiredMixin):
    def dispatch_request(self, *args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        if not is_admin_user():
            raise Forbidden()
        return super().dispatch_request(*args, **kwargs)
