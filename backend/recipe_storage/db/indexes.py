# 컬렉션 인덱스 생성
# 앱 스타트업에서 한 번 ensure_indexes()를 await로 호출한다.
# 목록 조회는 동등 필터만 쓰고 정렬은 메모리에서 한다 → 복합 인덱스 불필요

from recipe_storage.db.init import get_db

async def ensure_indexes(collection: str):
    db = get_db()
    col = db[collection]

    # 내 레시피 목록
    await col.create_index("ownerUid")
    # 공개 레시피 목록
    await col.create_index("isPublic")
