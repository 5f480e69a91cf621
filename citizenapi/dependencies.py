"""
라우터용 서비스 의존성

컨테이너의 서비스 팩토리에 요청 단위 DB 세션(get_db)을 넘겨 서비스를 만듭니다.
FastAPI 는 요청 안에서 get_db 결과를 캐시하므로 한 요청의 모든 서비스는
같은 세션을 공유하고, 요청이 끝나면 세션이 닫힙니다.
"""

from typing import Callable

from fastapi import Depends
from dependency_injector.wiring import inject, Provider
from sqlalchemy.orm import Session

from citizenapi.containers import Container
from citizenapi.database.session import get_db
from citizenapi.services.notification_service import NotificationService
from citizenapi.services.point_service import PointService
from citizenapi.services.preference_service import PreferenceService
from citizenapi.services.reward_service import RewardService
from citizenapi.services.user_service import UserService


@inject
def get_point_service(
    db: Session = Depends(get_db),
    factory: Callable[..., PointService] = Depends(
        Provider[Container.services.point_service]
    ),
) -> PointService:
    return factory(db=db)


@inject
def get_notification_service(
    db: Session = Depends(get_db),
    factory: Callable[..., NotificationService] = Depends(
        Provider[Container.services.notification_service]
    ),
) -> NotificationService:
    return factory(db=db)


@inject
def get_preference_service(
    db: Session = Depends(get_db),
    factory: Callable[..., PreferenceService] = Depends(
        Provider[Container.services.preference_service]
    ),
) -> PreferenceService:
    return factory(db=db)


@inject
def get_user_service(
    db: Session = Depends(get_db),
    factory: Callable[..., UserService] = Depends(
        Provider[Container.services.user_service]
    ),
) -> UserService:
    return factory(db=db)


@inject
def get_reward_service(
    db: Session = Depends(get_db),
    factory: Callable[..., RewardService] = Depends(
        Provider[Container.services.reward_service]
    ),
) -> RewardService:
    return factory(db=db)
