"""
기본 리워드 카탈로그 시드 스크립트
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from citizenapi.database.session import get_db_context
from citizenapi.models.rewards import Reward, RewardCategory

DEFAULT_REWARDS = [
    {
        "title": "Active Citizen Badge",
        "description": "Digital badge for citizens who completed their first supervision.",
        "point_cost": 50,
        "category": RewardCategory.DIGITAL_BADGE,
        "stock": None,
    },
    {
        "title": "Transparency Champion Medal",
        "description": "Commemorative NFT medal for verified KPI reports.",
        "point_cost": 300,
        "category": RewardCategory.NFT_MEDAL,
        "stock": 500,
    },
    {
        "title": "City Hall Tour",
        "description": "Guided tour of city hall with a council member.",
        "point_cost": 800,
        "category": RewardCategory.EXPERIENCE,
        "stock": 20,
    },
    {
        "title": "Eco Tumbler",
        "description": "Reusable tumbler delivered to your address.",
        "point_cost": 1200,
        "category": RewardCategory.PHYSICAL_ITEM,
        "stock": 100,
    },
]


def seed_rewards_data():
    """기본 리워드 데이터 시드 (제목 기준으로 이미 있으면 건너뜀)"""
    try:
        with get_db_context() as db:
            for reward_data in DEFAULT_REWARDS:
                existing = (
                    db.query(Reward).filter(Reward.title == reward_data["title"]).first()
                )

                if not existing:
                    db.add(Reward(is_active=True, **reward_data))
                    print(f"리워드 추가: {reward_data['title']}")
                else:
                    print(f"이미 존재하는 리워드: {reward_data['title']}")

        print(f"리워드 시드 데이터 생성 완료: {len(DEFAULT_REWARDS)}개 리워드")

    except Exception as e:
        print(f"리워드 시드 데이터 생성 실패: {str(e)}")
        raise


if __name__ == "__main__":
    seed_rewards_data()
