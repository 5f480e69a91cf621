from pydantic import BaseModel
from typing import List, Optional

from citizenapi.core.rbac import Permission, UserRole
from citizenapi.schemas.points import CitizenPointsResponse
from citizenapi.schemas.preferences import PreferencesResponse


class CurrentUser(BaseModel):
    """인증 공급자가 확인한 현재 사용자"""

    user_id: str
    login_id: str = ""
    role: UserRole = UserRole.CITIZEN


class UserData(BaseModel):
    """사용자 집계 정보 (포인트 + 환경설정)"""

    user_id: str
    login_id: str
    role: UserRole
    citizen_points: Optional[CitizenPointsResponse] = None
    preferences: Optional[PreferencesResponse] = None


class UserPermissionsResponse(BaseModel):
    role: UserRole
    permissions: List[Permission]
