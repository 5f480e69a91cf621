"""
역할 기반 접근 제어 (RBAC)

역할별 권한 테이블은 두 단계로 구성됩니다:
1. ROLE_OWN_PERMISSIONS: 각 역할이 직접 가지는 권한 (평면 매핑)
2. ROLE_PARENTS: 상속 관계 (MODERATOR -> CITIZEN, ADMIN -> MODERATOR)

build_role_permissions()가 임포트 시 한 번 상속 closure를 계산하며,
이후 ROLE_PERMISSIONS는 읽기 전용으로만 사용됩니다.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from fastapi import Depends


class UserRole(str, Enum):
    """사용자 역할 정의"""

    CITIZEN = "CITIZEN"  # 일반 시민
    MODERATOR = "MODERATOR"  # 콘텐츠 검수자
    ADMIN = "ADMIN"  # 관리자
    CIVIL_SERVANT = "CIVIL_SERVANT"  # 공무원 포털용


class Permission(str, Enum):
    # Citizen
    VIEW_CIVIL_SERVANTS = "VIEW_CIVIL_SERVANTS"
    CREATE_SUPERVISION = "CREATE_SUPERVISION"
    CREATE_OBLIGATION = "CREATE_OBLIGATION"
    CREATE_KPI = "CREATE_KPI"
    UPDATE_OWN_PROFILE = "UPDATE_OWN_PROFILE"
    EARN_POINTS = "EARN_POINTS"
    SPEND_POINTS = "SPEND_POINTS"

    # Moderator
    MODERATE_CONTENT = "MODERATE_CONTENT"
    VERIFY_EVIDENCE = "VERIFY_EVIDENCE"
    MANAGE_REPORTS = "MANAGE_REPORTS"

    # Admin
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_CIVIL_SERVANTS = "MANAGE_CIVIL_SERVANTS"
    MANAGE_SYSTEM_SETTINGS = "MANAGE_SYSTEM_SETTINGS"
    VIEW_ANALYTICS = "VIEW_ANALYTICS"
    MANAGE_REWARDS = "MANAGE_REWARDS"

    # Civil servant
    UPDATE_OWN_OBLIGATIONS = "UPDATE_OWN_OBLIGATIONS"
    UPDATE_OWN_KPIS = "UPDATE_OWN_KPIS"
    VIEW_OWN_SUPERVISION = "VIEW_OWN_SUPERVISION"


ROLE_OWN_PERMISSIONS: Dict[UserRole, Tuple[Permission, ...]] = {
    UserRole.CITIZEN: (
        Permission.VIEW_CIVIL_SERVANTS,
        Permission.CREATE_SUPERVISION,
        Permission.CREATE_OBLIGATION,
        Permission.CREATE_KPI,
        Permission.UPDATE_OWN_PROFILE,
        Permission.EARN_POINTS,
        Permission.SPEND_POINTS,
    ),
    UserRole.MODERATOR: (
        Permission.MODERATE_CONTENT,
        Permission.VERIFY_EVIDENCE,
        Permission.MANAGE_REPORTS,
    ),
    UserRole.ADMIN: (
        Permission.MANAGE_USERS,
        Permission.MANAGE_CIVIL_SERVANTS,
        Permission.MANAGE_SYSTEM_SETTINGS,
        Permission.VIEW_ANALYTICS,
        Permission.MANAGE_REWARDS,
    ),
    UserRole.CIVIL_SERVANT: (
        Permission.UPDATE_OWN_OBLIGATIONS,
        Permission.UPDATE_OWN_KPIS,
        Permission.VIEW_OWN_SUPERVISION,
        Permission.UPDATE_OWN_PROFILE,
    ),
}

ROLE_PARENTS: Dict[UserRole, Tuple[UserRole, ...]] = {
    UserRole.CITIZEN: (),
    UserRole.MODERATOR: (UserRole.CITIZEN,),
    UserRole.ADMIN: (UserRole.MODERATOR,),
    UserRole.CIVIL_SERVANT: (),
}


def build_role_permissions(
    own: Mapping[UserRole, Iterable[Permission]],
    parents: Mapping[UserRole, Iterable[UserRole]],
) -> Dict[UserRole, FrozenSet[Permission]]:
    """역할별 상속 권한 closure 계산

    Raises:
        ValueError: 상속 관계에 순환이 있는 경우
    """
    resolved: Dict[UserRole, FrozenSet[Permission]] = {}

    def _resolve(role: UserRole, path: Tuple[UserRole, ...]) -> FrozenSet[Permission]:
        if role in resolved:
            return resolved[role]
        if role in path:
            cycle = " -> ".join(r.value for r in path + (role,))
            raise ValueError(f"Cyclic role inheritance: {cycle}")

        permissions = set(own.get(role, ()))
        for parent in parents.get(role, ()):
            permissions |= _resolve(parent, path + (role,))

        resolved[role] = frozenset(permissions)
        return resolved[role]

    for role in own:
        _resolve(role, ())
    return resolved


ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = build_role_permissions(
    ROLE_OWN_PERMISSIONS, ROLE_PARENTS
)


def has_permission(user_role: UserRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(user_role, frozenset())


def has_any_permission(user_role: UserRole, permissions: Iterable[Permission]) -> bool:
    return any(has_permission(user_role, p) for p in permissions)


def has_all_permissions(user_role: UserRole, permissions: Iterable[Permission]) -> bool:
    return all(has_permission(user_role, p) for p in permissions)


def get_role_permissions(user_role: UserRole) -> List[Permission]:
    """역할의 전체 권한 목록 (enum 선언 순서로 정렬)"""
    granted = ROLE_PERMISSIONS.get(user_role, frozenset())
    return [p for p in Permission if p in granted]


# Cognito 그룹명 -> 역할 (우선순위 높은 순)
_GROUP_ROLES: Tuple[Tuple[str, UserRole], ...] = (
    ("admin", UserRole.ADMIN),
    ("moderator", UserRole.MODERATOR),
    ("civil_servant", UserRole.CIVIL_SERVANT),
)


def resolve_role(claims: Mapping[str, Any]) -> UserRole:
    """토큰 클레임에서 역할 결정 - 알 수 없으면 CITIZEN"""
    explicit: Optional[str] = claims.get("custom:role") or claims.get("role")
    if explicit:
        try:
            return UserRole(str(explicit).upper())
        except ValueError:
            pass

    groups = claims.get("cognito:groups") or []
    if isinstance(groups, str):
        groups = [groups]
    normalized = {str(g).lower() for g in groups}
    for group, role in _GROUP_ROLES:
        if group in normalized:
            return role
    return UserRole.CITIZEN


def require_permission(permission: Permission):
    """특정 권한이 필요한 엔드포인트용 의존성 팩토리"""
    # 순환 임포트 방지
    from citizenapi.core.auth_middleware import get_current_user
    from citizenapi.core.exceptions import AuthorizationError
    from citizenapi.schemas.user import CurrentUser

    def _require_permission(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if not has_permission(current_user.role, permission):
            raise AuthorizationError(
                f"Permission '{permission.value}' required",
                details={"role": current_user.role.value},
            )
        return current_user

    return _require_permission
