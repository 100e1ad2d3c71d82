# scripts/seed_demo.py
# 빈 DB에 데모 사용자 + 샘플 레시피 넣기
# 사용자가 한 명이라도 있으면 아무것도 하지 않는다 (몇 번 돌려도 안전)
#   python -m app.scripts.seed_demo

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from app.core.config import settings
from app.core.logging_setup import setup_logging
from app.core.security import hash_password
from app.db.indexes import ensure_indexes
from app.db.init import MongoStore
from app.db.models.recipe import RecipeIn, new_recipe_doc

log = logging.getLogger(__name__)

DEMO_EMAIL = "demo@recipeshare.com"
DEMO_NAME = "Demo User"
DEMO_PASSWORD = "password123"

SAMPLE_RECIPES = [
    {
        "title": "Creamy Tuscan Chicken",
        "description": "A rich and flavorful chicken dish with sun-dried tomatoes, spinach, and a creamy sauce.",
        "image": "https://images.unsplash.com/photo-1598300042247-d088f8ab3a91?w=500&h=300&fit=crop",
        "cookTime": "25 min",
        "prepTime": "10 min",
        "servings": 4,
        "category": "Dinner",
        "difficulty": "Medium",
        "tags": ["Italian", "Chicken", "Creamy"],
        "ingredients": [
            "4 boneless, skinless chicken breasts (6-8 oz each)",
            "2 tablespoons olive oil",
            "3 cloves garlic, minced",
            "1 cup heavy cream",
            "1/2 cup chicken broth",
            "1/2 cup sun-dried tomatoes, chopped",
            "1/3 cup grated Parmesan cheese",
            "3 cups fresh spinach",
        ],
        "instructions": [
            "Season chicken breasts with salt, pepper, and paprika on both sides.",
            "Heat olive oil in a large skillet over medium-high heat.",
            "Add chicken and cook for 6-7 minutes on each side until golden brown.",
            "Add garlic and cook for 1 minute until fragrant.",
            "Pour in chicken broth and scrape up any browned bits.",
            "Add heavy cream, sun-dried tomatoes, and seasonings.",
            "Add Parmesan cheese and stir until melted.",
            "Return chicken to skillet and simmer for 2-3 minutes.",
        ],
        "nutrition": {"calories": 485, "protein": "42g", "carbs": "8g", "fat": "32g"},
    },
    {
        "title": "Classic Chocolate Chip Cookies",
        "description": "Perfectly chewy cookies with the ideal balance of crispy edges and soft centers.",
        "image": "https://images.unsplash.com/photo-1499636136210-6f4ee915583e?w=500&h=300&fit=crop",
        "cookTime": "15 min",
        "prepTime": "10 min",
        "servings": 24,
        "category": "Dessert",
        "difficulty": "Easy",
        "tags": ["Cookies", "Chocolate", "Baking"],
        "ingredients": [
            "2 1/4 cups all-purpose flour",
            "1 tsp baking soda",
            "1 tsp salt",
            "1 cup butter, softened",
            "3/4 cup granulated sugar",
            "3/4 cup packed brown sugar",
            "2 large eggs",
            "2 cups chocolate chips",
        ],
        "instructions": [
            "Preheat oven to 375°F (190°C).",
            "In a medium bowl, combine flour, baking soda, and salt.",
            "In a large bowl, beat butter and sugars until creamy.",
            "Add eggs one at a time, beating well after each addition.",
            "Gradually blend in flour mixture.",
            "Stir in chocolate chips.",
            "Drop rounded tablespoons onto ungreased cookie sheets.",
            "Bake for 9-11 minutes or until golden brown.",
        ],
    },
]


async def seed_demo(db) -> Dict[str, Any]:
    """users가 비어 있을 때만 데모 데이터 삽입. 결과 요약 반환"""
    if await db["users"].count_documents({}) > 0:
        log.info("[seed] database already seeded")
        return {"seeded": False, "recipes": 0}

    now = datetime.now(timezone.utc)
    user = {
        "email": DEMO_EMAIL,
        "name": DEMO_NAME,
        "password": hash_password(DEMO_PASSWORD),
        "createdAt": now,
        "updatedAt": now,
    }
    user["_id"] = (await db["users"].insert_one(user)).inserted_id

    # 샘플도 API와 같은 검증을 통과해야 한다
    docs = [new_recipe_doc(RecipeIn(**r), user, now) for r in SAMPLE_RECIPES]
    await db["recipes"].insert_many(docs)

    log.info("[seed] demo user=%s recipes=%d", user["_id"], len(docs))
    return {"seeded": True, "recipes": len(docs)}


async def main():
    setup_logging()
    store = MongoStore(settings.MONGO_URI, settings.MONGO_DB)
    db = await store.connect()
    try:
        await ensure_indexes(db)
        result = await seed_demo(db)
        print(f"[seed] done. {result}")
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
