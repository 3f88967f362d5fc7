# 레시피 문서 1건 원본 구조 출력 (id 없으면 첫 문서)
#   python -m recipe_storage.scripts.inspect_recipe [recipe_id]
import asyncio
import json
import sys
from typing import Optional

from recipe_storage.core.config import get_settings
from recipe_storage.db.init import close_db, get_db, init_db

async def main(recipe_id: Optional[str] = None):
    settings = get_settings()
    await init_db(settings.MONGODB_URI, settings.MONGODB_DB)
    try:
        col = get_db()[settings.RECIPES_COLLECTION]
        query = {"_id": recipe_id} if recipe_id else {}
        doc = await col.find_one(query)
    finally:
        await close_db()

    if not doc:
        print("No recipes found")
        return
    print("Recipe ID:", doc.get("_id"))
    print("Recipe Name:", doc.get("name") or doc.get("recipeName") or doc.get("title"))
    print("\nFull document structure:")
    print(json.dumps(doc, indent=2, ensure_ascii=False, default=str))

if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
