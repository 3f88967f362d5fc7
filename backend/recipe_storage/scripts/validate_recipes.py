# 저장된 레시피 불변식 점검 (owner/id/name/servings/재료/조리순서/source/시각)
#   python -m recipe_storage.scripts.validate_recipes [limit]
import asyncio
import sys
from typing import List

from pydantic import ValidationError

from recipe_storage.core.config import get_settings
from recipe_storage.db.init import close_db, get_db, init_db
from recipe_storage.db.models.recipe import Recipe

def _problems(doc: dict) -> List[str]:
    probs: List[str] = []
    try:
        Recipe.model_validate(doc)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"]) or "document"
            probs.append(f"{loc}: {err['msg']}")
    # 키와 id 필드가 어긋난 문서
    if doc.get("_id") != doc.get("id"):
        probs.append("id-mismatch")
    return probs

async def main(limit: int = 500):
    settings = get_settings()
    await init_db(settings.MONGODB_URI, settings.MONGODB_DB)
    try:
        col = get_db()[settings.RECIPES_COLLECTION]
        docs = await col.find({}).limit(limit).to_list(length=limit)
    finally:
        await close_db()
    bad = []
    for d in docs:
        p = _problems(d)
        if p:
            bad.append((d.get("_id"), d.get("name"), p))
    print(f"checked: {len(docs)}, issues: {len(bad)}")
    for bid, name, probs in bad[:20]:
        print("-", bid, "/", name, "=>", probs)

if __name__ == "__main__":
    asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 500))
