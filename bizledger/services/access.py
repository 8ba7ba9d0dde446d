"""User lookup and permission checks"""

from dataclasses import dataclass
from typing import List, Sequence

from bizledger.domain.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from bizledger.domain.models import UserRole, parse_enum
from bizledger.domain.permissions import Permission, ensure_permission
from bizledger.infrastructure.database.repositories import UserRepository
from bizledger.infrastructure.database.session import Database


@dataclass
class Actor:
    """The user performing an operation, with their effective grants"""

    user_id: int
    username: str
    role: UserRole
    permissions: List[str]


class AccessService:
    def __init__(self, database: Database):
        self.database = database

    def load_actor(self, user_id: int) -> Actor:
        with self.database.unit_of_work("load_actor") as session:
            users = UserRepository(session)
            user = users.get(user_id)
            if user is None:
                raise PermissionDeniedError(f"Unknown user {user_id}")
            return Actor(
                user_id=user.id,
                username=user.username,
                role=UserRole(user.role),
                permissions=users.permission_names(user),
            )

    def list_users(self) -> List[Actor]:
        """All users by username, with their grants"""
        with self.database.unit_of_work("list_users") as session:
            users = UserRepository(session)
            return [
                Actor(
                    user_id=user.id,
                    username=user.username,
                    role=UserRole(user.role),
                    permissions=users.permission_names(user),
                )
                for user in users.list()
            ]

    def authorize(self, user_id: int, permission: Permission) -> Actor:
        """Load the user and check the permission, raising PermissionDeniedError on failure"""
        actor = self.load_actor(user_id)
        ensure_permission(actor.username, actor.role, actor.permissions, permission)
        return actor

    def create_user(
        self,
        username: str,
        role: UserRole | str = UserRole.USER,
        permissions: Sequence[Permission | str] = (),
    ) -> int:
        """Create a user and grant the given permissions; password setup belongs to the login layer"""
        if not username or not username.strip():
            raise ValidationError("Username is required")
        user_role = parse_enum(UserRole, role, "role")
        names = [parse_enum(Permission, p, "permission").value for p in permissions]

        with self.database.unit_of_work("create_user") as session:
            users = UserRepository(session)
            if users.get_by_username(username.strip()) is not None:
                raise ValidationError(f"Username '{username.strip()}' is already taken")
            user = users.create(username.strip(), user_role.value)
            users.set_permissions(user, names)
            return user.id

    def set_permissions(self, user_id: int, permissions: Sequence[Permission | str]) -> None:
        names = [parse_enum(Permission, p, "permission").value for p in permissions]
        with self.database.unit_of_work("set_permissions") as session:
            users = UserRepository(session)
            user = users.get(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            users.set_permissions(user, names)
