from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from flask.views import MethodView
from loguru import logger

from ..errors import BadRequest, InvalidCredentials
from ..models import GLOBAL_SCOPE
from ..policies import request_data
from ..security import ROLE_ADMIN, ROLE_PARTICIPANT, Identity, issue_token, verify_admin_password
from ..services.participants import authenticate


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


class LoginView(MethodView):
    def post(self):
        data = request_data()
        username = (data.get("username") or "").strip()
        password = data.get("password") or ""
        if not username or not password:
            raise BadRequest("Username and password required")

        scope = None
        if not current_app.config.get("SANTA_MULTI_TENANT", True):
            scope = GLOBAL_SCOPE
        elif data.get("family_code"):
            scope = str(data["family_code"]).strip()

        user = authenticate(username, password, scope)
        token = issue_token(Identity(name=user.name, role=ROLE_PARTICIPANT, scope=user.family_code))
        return jsonify(
            user={"id": user.id, "name": user.name, "family_code": user.family_code},
            token=token,
        )


class AdminVerifyView(MethodView):
    def post(self):
        password = request_data().get("password") or ""
        if not password:
            raise BadRequest("Password required")

        if not verify_admin_password(password):
            logger.warning("rejected admin verification attempt")
            raise InvalidCredentials("Invalid admin password")

        return jsonify(success=True, token=issue_token(Identity(name="admin", role=ROLE_ADMIN)))


auth_bp.add_url_rule("/login", view_func=LoginView.as_view("login"), methods=["POST"])
auth_bp.add_url_rule("/admin/verify", view_func=AdminVerifyView.as_view("admin_verify"), methods=["POST"])
