"""
Capture runner: arms one preference slot against the configured mailbox,
waits for the capture agent to deliver, and prints the resulting wishlist
payload as JSON.

Usage:
    uv run python capture.py [Ideal|Alternative|OkToBuy]

Reads VARIANT_SYNC_* environment variables (see variant_sync/config.py).
"""

import asyncio
import json
import logging
import sys

from models import CommitPayload, SlotId
from variant_sync.commit import build_payload
from variant_sync.config import SyncConfig
from variant_sync.mailbox import MailboxClient
from variant_sync.slots import SlotSet
from variant_sync.sync import SyncCoordinator

logger = logging.getLogger(__name__)


async def capture_preference(
    slot_id: SlotId,
    client: MailboxClient,
    config: SyncConfig,
) -> CommitPayload:
    """Arm slot_id, wait until a capture lands in it, and build the payload."""
    slots = SlotSet()
    coordinator = SyncCoordinator(slots, client, config)
    try:
        await coordinator.arm(slot_id)
        logger.info("Waiting for a capture for the %s slot...", SlotId(slot_id).value)
        while slots[slot_id].armed:
            await asyncio.sleep(config.poll_interval)
        return build_payload(slots)
    finally:
        await coordinator.close()


async def main(argv: list[str]) -> int:
    slot_name = argv[1] if len(argv) > 1 else SlotId.IDEAL.value
    try:
        slot_id = SlotId(slot_name)
    except ValueError:
        logger.error("Unknown slot %r; expected one of %s", slot_name, ", ".join(s.value for s in SlotId))
        return 2

    config = SyncConfig.from_env()
    payload = await capture_preference(slot_id, MailboxClient(config), config)
    print(json.dumps(payload.to_wishlist_item(), indent=2))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    sys.exit(asyncio.run(main(sys.argv)))
