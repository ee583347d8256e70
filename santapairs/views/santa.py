from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import current_user

from ..errors import BadRequest, Forbidden
from ..policies import AdminRequiredMixin, LoginRequiredMixin, is_admin_user, request_data, resolve_scope
from ..services.assignments import assignments_generated, generate_assignments, get_assignment
from ..services.resets import reset_scope

santa_bp = Blueprint("santa", __name__, url_prefix="/api")


class GenerateAssignmentsView(AdminRequiredMixin):
    def post(self):
        scope = resolve_scope()
        seed = request_data().get("seed")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise BadRequest("seed must be an integer")

        pairs = generate_assignments(scope, seed=seed)
        return jsonify(message="Assignments generated successfully", count=len(pairs))


class AssignmentStatusView(LoginRequiredMixin):
    def get(self):
        return jsonify(generated=assignments_generated(resolve_scope()))


class MyAssignmentView(LoginRequiredMixin):
    def get(self, username: str):
        scope = resolve_scope()
        if not is_admin_user() and username != current_user.name:
            raise Forbidden()
        return jsonify(receiver=get_assignment(username, scope))


class ResetView(AdminRequiredMixin):
    def post(self):
        reset_scope(resolve_scope())
        return jsonify(message="Family data reset")


santa_bp.add_url_rule(
    "/assignments/generate",
    view_func=GenerateAssignmentsView.as_view("generate_assignments"),
    methods=["POST"],
)
santa_bp.add_url_rule("/assignments/status", view_func=AssignmentStatusView.as_view("assignment_status"))
santa_bp.add_url_rule("/assignments/<path:username>", view_func=MyAssignmentView.as_view("my_assignment"))
santa_bp.add_url_rule("/reset", view_func=ResetView.as_view("reset"), methods=["POST"])
