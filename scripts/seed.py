"""
Create the pavilion tables and seed the launch pavilions.

Usage:
    python scripts/seed.py [--drop]

Talks to DATABASE_SYNC_URL directly; existing pavilions with the same id are
left untouched.
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, SessionLocal, sync_engine  # noqa: E402
from models import Pavilion  # noqa: E402

PAVILIONS = [
    {
        "id": 1,
        "name": "日本館",
        "image_url": "/pavilion-img/Nihonkan.png",
        "description": (
            "日本館は、大阪・関西万博のテーマである「いのち輝く未来社会のデザイン」を"
            "開催国としてプレゼンテーションする拠点であり、当該テーマの具現化や、"
            "日本の取り組みの発信等を行います。「いのちと、いのちの、あいだに」をテーマに、"
            "万博会場内の生ゴミを利用したバイオガス発電や、世界に貢献しうる日本の先端的な"
            "技術等を活用し、一つの循環を創出し、持続可能な社会に向けた来場者の行動変容を促します。"
        ),
    },
    {
        "id": 2,
        "name": "アメリカパビリオン",
        "image_url": "/pavilion-img/america.jpg",
        "description": (
            "共に創出できることを想像しよう 米国パビリオンは米国の革新性と独創性を視覚的に表現。"
            "木造の外観が特徴的な三角形の建物2棟と並行に、キューブが浮かぶように配置され、"
            "ステージも設けられています。パビリオンでは、テクノロジー、宇宙開発、教育、文化、"
            "起業家精神における米国のリーダーシップを紹介し、5つの没入型展示エリアが"
            "新たな視点から可能性について考えるよう来場者を迎えます。美しきアメリカ"
        ),
    },
]


def seed(drop: bool = False) -> int:
    if drop:
        Base.metadata.drop_all(bind=sync_engine)
    Base.metadata.create_all(bind=sync_engine)

    created = 0
    with SessionLocal() as db:
        for data in PAVILIONS:
            if db.get(Pavilion, data["id"]) is not None:
                continue
            db.add(Pavilion(**data))
            created += 1
        db.commit()
    return created


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the pavilion tables")
    parser.add_argument(
        "--drop", action="store_true", help="Drop existing tables before seeding"
    )
    return parser.parse_args()


def main():
    args = parse_args()
    created = seed(drop=args.drop)
    print(f"Seeded {created} pavilions ({len(PAVILIONS) - created} already present)")


if __name__ == "__main__":
    main()
