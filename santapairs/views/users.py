from __future__ import annotations

from flask import Blueprint, jsonify

from ..errors import BadRequest
from ..policies import AdminRequiredMixin, request_data, resolve_scope
from ..services.participants import add_participant, list_participants, remove_participant


users_bp = Blueprint("users", __name__, url_prefix="/api")


class UsersView(AdminRequiredMixin):
    def get(self):
        scope = resolve_scope()
        return jsonify([p.to_dict() for p in list_participants(scope)])

    def post(self):
        data = request_data()
        name = (data.get("name") or "").strip()
        password = data.get("password") or ""
        if not name or not password:
            raise BadRequest("Name, password, and family_code required")

        scope = resolve_scope()
        p = add_participant(name, password, scope)
        return jsonify(p.to_dict()), 201


class UserView(AdminRequiredMixin):
    def delete(self, name: str):
        scope = resolve_scope()
        remove_participant(name, scope)
        return jsonify(message="User deleted")


users_bp.add_url_rule("/users", view_func=UsersView.as_view("users"), methods=["GET", "POST"])
users_bp.add_url_rule("/users/<path:name>", view_func=UserView.as_view("user"), methods=["DELETE"])
