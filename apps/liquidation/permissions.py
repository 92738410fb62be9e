from rest_framework.permissions import BasePermission


class HasAdminRole(BasePermission):
    """Любая админская роль: requester или approver."""

    message = "Admin role required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.admin_role)


class IsApprover(BasePermission):
    message = "Only approvers can review liquidation requests"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_approver)
