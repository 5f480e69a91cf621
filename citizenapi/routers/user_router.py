"""
사용자 API 라우터

- GET /users/me: 내 정보 (포인트 원장/환경설정이 없으면 생성)
- GET /users/me/permissions: 내 역할과 권한
- GET /users/me/preferences, PUT /users/me/preferences
- POST /users/me/preferences/import: 이전 형식 환경설정 변환 저장
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from citizenapi.core.auth_middleware import get_current_user
from citizenapi.core.rbac import Permission, get_role_permissions, require_permission
from citizenapi.dependencies import get_preference_service, get_user_service
from citizenapi.schemas.preferences import PreferencesResponse, PreferencesUpdate
from citizenapi.schemas.user import CurrentUser, UserData, UserPermissionsResponse
from citizenapi.services.preference_service import PreferenceService
from citizenapi.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserData)
async def get_me(
    current_user: CurrentUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserData:
    return user_service.initialize_user_data(current_user)


@router.get("/me/permissions", response_model=UserPermissionsResponse)
async def get_my_permissions(
    current_user: CurrentUser = Depends(get_current_user),
) -> UserPermissionsResponse:
    return UserPermissionsResponse(
        role=current_user.role, permissions=get_role_permissions(current_user.role)
    )


@router.get("/me/preferences", response_model=PreferencesResponse)
async def get_my_preferences(
    current_user: CurrentUser = Depends(get_current_user),
    preference_service: PreferenceService = Depends(get_preference_service),
) -> PreferencesResponse:
    return preference_service.get_or_create_preferences(current_user.user_id)


@router.put("/me/preferences", response_model=PreferencesResponse)
async def update_my_preferences(
    update: PreferencesUpdate,
    current_user: CurrentUser = Depends(require_permission(Permission.UPDATE_OWN_PROFILE)),
    preference_service: PreferenceService = Depends(get_preference_service),
) -> PreferencesResponse:
    return preference_service.update_preferences(current_user.user_id, update)


@router.post("/me/preferences/import", response_model=PreferencesResponse)
async def import_my_preferences(
    raw: Dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_permission(Permission.UPDATE_OWN_PROFILE)),
    preference_service: PreferenceService = Depends(get_preference_service),
) -> PreferencesResponse:
    return preference_service.import_legacy_preferences(current_user.user_id, raw)
