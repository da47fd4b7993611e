"""Helpers shared by the integration flows."""

import uuid

from src.p2p_gateway.auth.jwt_handler import create_access_token


def new_user() -> tuple[str, dict[str, str]]:
    """A fresh opaque user id and its bearer header."""
    user_id = f"it_{uuid.uuid4().hex[:12]}"
    return user_id, {"Authorization": f"Bearer {create_access_token(user_id)}"}
