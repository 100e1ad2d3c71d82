# 컬렉션 인덱스 생성
# 앱 스타트업에서 한 번 ensure_indexes(db)를 await로 호출한다.

from pymongo import ASCENDING, DESCENDING, TEXT

# $text 검색 대상 필드 (컬렉션당 텍스트 인덱스는 하나만 가능)
RECIPE_TEXT_FIELDS = ("title", "description", "tags")


async def ensure_user_indexes(db):
    # 이메일은 소문자로 저장 → unique 인덱스가 곧 대소문자 무시 유일성
    await db["users"].create_index("email", unique=True)


async def ensure_recipe_indexes(db):
    col = db["recipes"]
    await col.create_index([("author", ASCENDING), ("createdAt", DESCENDING)])
    await col.create_index([("category", ASCENDING), ("difficulty", ASCENDING)])
    await col.create_index([("rating", DESCENDING), ("reviewCount", DESCENDING)])
    await col.create_index([("createdAt", DESCENDING)])
    await col.create_index("isPublished")
    await col.create_index("tags")
    await col.create_index([(f, TEXT) for f in RECIPE_TEXT_FIELDS], name="recipe_text")


async def ensure_comment_indexes(db):
    col = db["comments"]
    await col.create_index([("recipe", ASCENDING), ("createdAt", DESCENDING)])
    await col.create_index([("author", ASCENDING), ("createdAt", DESCENDING)])
    await col.create_index("isApproved")


async def ensure_indexes(db):
    await ensure_user_indexes(db)
    await ensure_recipe_indexes(db)
    await ensure_comment_indexes(db)
