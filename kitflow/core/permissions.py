from kitflow.core.exceptions import Forbidden
from kitflow.models.user import User, UserRole


class PermissionChecker:
    """
    Role checks for the current user.

    Roles are flat: ``admin`` may do everything, ``user`` and ``member`` may
    use the day-to-day operations but not deletions, bulk clears or user
    management.
    """

    def __init__(self, user: User):
        self.user = user

    def is_admin(self) -> bool:
        return self.user.role == UserRole.ADMIN.value

    def require_admin(self) -> None:
        if not self.is_admin():
            raise Forbidden("Admin access required")
