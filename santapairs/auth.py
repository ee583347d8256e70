from __future__ import annotations

from flask import Request

from .extensions import login_manager
from .security import Identity, verify_token


@login_manager.request_loader
def load_identity_from_request(request: Request) -> Identity | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return verify_token(token.strip())
