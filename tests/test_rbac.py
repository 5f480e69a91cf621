import pytest

from citizenapi.core.rbac import (
    ROLE_OWN_PERMISSIONS,
    ROLE_PERMISSIONS,
    Permission,
    UserRole,
    build_role_permissions,
    get_role_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
    resolve_role,
)


class TestRolePermissions:
    """역할/권한 테이블 테스트"""

    def test_admin_inherits_moderator_and_citizen(self):
        for permission in ROLE_OWN_PERMISSIONS[UserRole.CITIZEN]:
            assert has_permission(UserRole.ADMIN, permission)
        for permission in ROLE_OWN_PERMISSIONS[UserRole.MODERATOR]:
            assert has_permission(UserRole.ADMIN, permission)
        assert has_permission(UserRole.ADMIN, Permission.MANAGE_USERS)

    def test_citizen_cannot_manage_users(self):
        assert not has_permission(UserRole.CITIZEN, Permission.MANAGE_USERS)
        assert has_permission(UserRole.CITIZEN, Permission.SPEND_POINTS)

    def test_moderator_inherits_citizen_only(self):
        assert has_permission(UserRole.MODERATOR, Permission.EARN_POINTS)
        assert has_permission(UserRole.MODERATOR, Permission.VERIFY_EVIDENCE)
        assert not has_permission(UserRole.MODERATOR, Permission.VIEW_ANALYTICS)

    def test_civil_servant_is_separate_tree(self):
        assert has_permission(UserRole.CIVIL_SERVANT, Permission.UPDATE_OWN_KPIS)
        assert has_permission(UserRole.CIVIL_SERVANT, Permission.UPDATE_OWN_PROFILE)
        assert not has_permission(UserRole.CIVIL_SERVANT, Permission.SPEND_POINTS)

    def test_any_and_all(self):
        assert has_any_permission(
            UserRole.CITIZEN, [Permission.MANAGE_USERS, Permission.CREATE_KPI]
        )
        assert not has_all_permissions(
            UserRole.CITIZEN, [Permission.MANAGE_USERS, Permission.CREATE_KPI]
        )
        assert has_all_permissions(UserRole.CITIZEN, [])

    def test_role_permissions_listed_in_declaration_order(self):
        permissions = get_role_permissions(UserRole.MODERATOR)

        assert permissions[0] == Permission.VIEW_CIVIL_SERVANTS
        assert permissions == [p for p in Permission if p in ROLE_PERMISSIONS[UserRole.MODERATOR]]

    def test_cycle_is_rejected(self):
        parents = {
            UserRole.CITIZEN: (UserRole.ADMIN,),
            UserRole.MODERATOR: (UserRole.CITIZEN,),
            UserRole.ADMIN: (UserRole.MODERATOR,),
            UserRole.CIVIL_SERVANT: (),
        }

        with pytest.raises(ValueError):
            build_role_permissions(ROLE_OWN_PERMISSIONS, parents)


class TestResolveRole:
    @pytest.mark.parametrize(
        "claims, expected",
        [
            ({"custom:role": "admin"}, UserRole.ADMIN),
            ({"role": "MODERATOR"}, UserRole.MODERATOR),
            ({"cognito:groups": ["civil_servant"]}, UserRole.CIVIL_SERVANT),
            ({"cognito:groups": ["moderator", "admin"]}, UserRole.ADMIN),
            ({"cognito:groups": "Admin"}, UserRole.ADMIN),
            ({"custom:role": "superuser"}, UserRole.CITIZEN),
            ({}, UserRole.CITIZEN),
        ],
    )
    def test_resolve_role(self, claims, expected):
        assert resolve_role(claims) == expected
