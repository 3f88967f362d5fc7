# recipe_storage/scripts/migrate_recipe_data.py
# 구버전 레시피 문서 → 현재 저장 스키마로 이관
# - recipeName/title → name, userId → ownerUid
# - prepTime/prepTimeMinutes (숫자 또는 "15 minutes") → prepMinutes (cook 도 동일)
# - nutritionalInfo.perServing → nutrition, isPublic 없으면 false
# 기본은 dry-run, --apply 일 때만 쓴다
#   python -m recipe_storage.scripts.migrate_recipe_data [--apply]

import argparse
import asyncio
import re
from typing import Any, Dict, List, Optional, Tuple

from recipe_storage.core.config import get_settings
from recipe_storage.db.init import close_db, get_db, init_db

_MINUTES_RE = re.compile(r"(\d+)")

# 구 필드 → 새 필드 (앞쪽이 우선)
_RENAMES = {
    "name": ("recipeName", "title"),
    "ownerUid": ("userId",),
    "prepMinutes": ("prepTimeMinutes", "prepTime"),
    "cookMinutes": ("cookTimeMinutes", "cookTime"),
}


def _to_minutes(v: Any) -> Optional[int]:
    # 숫자 그대로, 문자열이면 첫 숫자 추출
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return int(v) if v > 0 else None
    if isinstance(v, str):
        m = _MINUTES_RE.search(v)
        if m and int(m.group(1)) > 0:
            return int(m.group(1))
    return None


def migrate_document(doc: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """($set 할 필드, $unset 할 필드) 반환. 둘 다 비면 이미 최신."""
    sets: Dict[str, Any] = {}
    unsets: List[str] = []

    for new, olds in _RENAMES.items():
        present = [o for o in olds if o in doc]
        if new not in doc:
            for old in present:
                value = doc[old]
                if new.endswith("Minutes"):
                    value = _to_minutes(value)
                if value not in (None, ""):
                    sets[new] = value
                    break
        unsets.extend(present)

    if "nutrition" not in doc and isinstance(doc.get("nutritionalInfo"), dict):
        per = doc["nutritionalInfo"].get("perServing")
        if isinstance(per, dict):
            sets["nutrition"] = {k: v for k, v in per.items()
                                 if isinstance(v, (int, float)) and not isinstance(v, bool)}
    if "nutritionalInfo" in doc:
        unsets.append("nutritionalInfo")

    # 응답 전용 필드가 저장돼 있던 경우
    for derived in ("totalTimeMinutes", "totalMinutes"):
        if derived in doc:
            unsets.append(derived)

    if "isPublic" not in doc:
        sets["isPublic"] = False

    return sets, unsets


async def main(apply: bool = False) -> None:
    settings = get_settings()
    await init_db(settings.MONGODB_URI, settings.MONGODB_DB)
    col = get_db()[settings.RECIPES_COLLECTION]

    updated = skipped = errors = 0
    try:
        async for doc in col.find({}):
            rid = doc.get("_id")
            try:
                sets, unsets = migrate_document(doc)
                if not sets and not unsets:
                    skipped += 1
                    continue
                print(f"- {rid}: set={sorted(sets)} unset={unsets}")
                if apply:
                    update: Dict[str, Any] = {}
                    if sets:
                        update["$set"] = sets
                    if unsets:
                        update["$unset"] = {k: "" for k in unsets}
                    await col.update_one({"_id": rid}, update)
                updated += 1
            except Exception as e:
                errors += 1
                print(f"! {rid}: {e}")
    finally:
        await close_db()

    mode = "applied" if apply else "dry-run"
    print(f"[{mode}] updated: {updated}, skipped: {skipped}, errors: {errors}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Migrate legacy recipe documents")
    parser.add_argument("--apply", action="store_true", help="write changes (default: dry-run)")
    args = parser.parse_args()
    asyncio.run(main(apply=args.apply))
