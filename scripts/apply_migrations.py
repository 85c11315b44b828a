import asyncio
import os
import sys
from pathlib import Path

# Add the project root to sys.path
sys.path.append(os.getcwd())

from inframind.storage.database import close_database, get_database

MIGRATIONS_DIR = Path("migrations")


async def apply_migrations() -> int:
    files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not files:
        print(f"❌ No migrations found in {MIGRATIONS_DIR}/")
        return 1

    db = await get_database()
    try:
        for path in files:
            print(f"🐘 Applying {path.name}...")
            try:
                async with db.transaction() as conn:
                    await conn.execute(path.read_text())
            except Exception as e:
                print(f"❌ {path.name} failed: {e}")
                return 1
            print(f"✅ {path.name} applied")
    finally:
        await close_database()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(apply_migrations()))
