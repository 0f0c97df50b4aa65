import argparse
import asyncio
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# --- Path Setup ---
# This file is assumed to be in <project_root>/scripts/audit_slot_capacity.py
CURRENT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = CURRENT_DIR.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

load_dotenv(PROJECT_ROOT / '.env')

from src.carpool_schedule_backend.common.config import settings
from src.carpool_schedule_backend.database.repository import ScheduleSlotRepository
from src.carpool_schedule_backend.services.capacity_calculator import CapacityCalculator
from src.carpool_schedule_backend.services.slot_integrity_validator import SlotIntegrityValidator


async def audit_slot_capacity(group_id: uuid.UUID | None) -> int:
    print("Connecting to database...")
    engine = create_async_engine(settings.database_url)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with async_session() as session:
            validator = SlotIntegrityValidator(ScheduleSlotRepository(session), CapacityCalculator())
            print("--- Checking Slot Capacity Integrity ---")
            failures = await validator.audit_slots(group_id)
    finally:
        await engine.dispose()

    for slot_id, message in failures.items():
        print(f"Slot {slot_id}: {message}")

    if not failures:
        print("✅ PASS: Every slot is within its effective capacity.")
        return 0
    print(f"❌ FAIL: {len(failures)} slot(s) over capacity.")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Audit schedule slots against their effective capacity.")
    parser.add_argument("--group-id", type=uuid.UUID, default=None, help="Only audit slots of this group.")
    args = parser.parse_args()
    sys.exit(asyncio.run(audit_slot_capacity(args.group_id)))
