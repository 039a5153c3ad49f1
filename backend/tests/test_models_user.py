# backend/tests/test_models_user.py
from app.models.user import Role, User, UserStatus, user_roles


def test_user_has_required_fields():
    assert hasattr(User, "id")
    assert hasattr(User, "username")
    assert hasattr(User, "email")
    assert hasattr(User, "password_hash")
    assert hasattr(User, "roles")


def test_user_status_enum():
    assert UserStatus.ACTIVE.value == "active"
    assert UserStatus.INACTIVE.value == "inactive"


def test_role_names():
    user = User(username="ana", roles=[Role(name="user"), Role(name="admin")])
    assert user.role_names == ["user", "admin"]


def test_user_roles_association():
    assert set(user_roles.c.keys()) == {"user_id", "role_id", "assigned_at"}
    assert User.__table__.c.username.unique
    assert User.__table__.c.email.unique
