"""Shared FastAPI dependencies."""

from fastapi import Header


def get_current_user_id(x_user_id: int | None = Header(default=None)) -> int | None:
    """Identity of the signed-in user, forwarded by the auth gateway.

    Returns None for anonymous calls; invoices are then created without a
    creator stamp.
    """
    return x_user_id
