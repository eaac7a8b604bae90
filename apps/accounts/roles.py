# apps/accounts/roles.py
from django.contrib.auth import get_user_model
User = get_user_model()


def role_of(user) -> str:
    if not (user and user.is_authenticated):
        return ""
    return getattr(user, "role", "") or ""


def is_admin(user: User) -> bool:
    # ADMIN = back office; superuser counts as admin too
    return bool(user and user.is_authenticated and (role_of(user) == User.ROLE_ADMIN or user.is_superuser))


def is_client(user: User) -> bool:
    return role_of(user) == User.ROLE_CLIENT


def is_gruzchik(user: User) -> bool:
    return role_of(user) == User.ROLE_GRUZCHIK


def has_role(user: User, *roles: str) -> bool:
    """Admins pass every role check, everyone else needs one of ``roles``."""
    if is_admin(user):
        return True
    return role_of(user) in roles


def sender_label(user: User) -> str:
    """Chat sender tag shown next to a message."""
    role = role_of(user)
    if role == User.ROLE_ADMIN or getattr(user, "is_superuser", False):
        return "admin"
    if role == User.ROLE_GRUZCHIK:
        return "gruzchik"
    if role == User.ROLE_PROVIDER:
        return "provider"
    return "client"
