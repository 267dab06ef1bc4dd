"""
Routes mailbox captures into the armed preference slot.

The coordinator owns at most one SyncSession. Arming a slot tears down the
previous session before anything else happens, so a capture polled for one
slot can never be written into another:

  1. cancel the old session's poll task and disarm its slot;
  2. arm the requested slot (clearing its previous capture);
  3. poll once immediately, then every `poll_interval` seconds;
  4. on the first non-empty capture: normalize keys, keep valid cleaned
     values, deliver to the slot, end the session.

A poll result is only routed while the session that issued it is still the
current one; anything else is a stale delivery and is dropped.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from itertools import count

from models import RawCapture, SlotId
from variant_sync.config import SyncConfig
from variant_sync.errors import CoordinatorClosed, MailboxUnreachable
from variant_sync.mailbox.client import MailboxClient
from variant_sync.normalize import clean, normalize, rejection_reason
from variant_sync.slots.slot import SlotSet

logger = logging.getLogger(__name__)

_session_ids = count(1)


@dataclass
class SyncSession:
    target_slot: SlotId
    session_id: int = field(default_factory=lambda: next(_session_ids))
    poll_task: asyncio.Task | None = None
    closed: bool = False

    def cancel(self) -> None:
        self.closed = True
        task = self.poll_task
        self.poll_task = None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # The loop may be tearing down its own session after a delivery.
        if task is not current:
            task.cancel()


def build_attribute_map(capture: RawCapture) -> dict[str, str]:
    """Normalize and validate a capture's variants into an attribute map."""
    attributes: dict[str, str] = {}
    for raw_key, raw_value in (capture.variants or {}).items():
        key = normalize(raw_key)
        if not key:
            continue
        reason = rejection_reason(raw_value)
        if reason is not None:
            logger.debug("Discarded %s=%r (%s)", raw_key, raw_value, reason)
            continue
        attributes[key] = clean(raw_value)

    # Some pages document style outside the variant selector.
    if "Style" not in attributes:
        for raw_key, raw_value in capture.specifications.items():
            if normalize(raw_key) == "Style" and rejection_reason(raw_value) is None:
                attributes["Style"] = clean(raw_value)
                break
    return attributes


class SyncCoordinator:
    def __init__(
        self,
        slots: SlotSet,
        client: MailboxClient,
        config: SyncConfig | None = None,
    ) -> None:
        self.slots = slots
        self.client = client
        self.config = config or client.config
        self._session: SyncSession | None = None
        # Mailbox timestamp of the last capture written into a slot.
        self._last_delivered: float | None = None
        self._closed = False

    @property
    def session(self) -> SyncSession | None:
        return self._session

    async def arm(self, slot_id: SlotId) -> SyncSession:
        """Make slot_id the only capture target and start polling for it."""
        if self._closed:
            raise CoordinatorClosed()
        slot_id = SlotId(slot_id)
        self._teardown()

        self.slots[slot_id].arm()
        session = SyncSession(target_slot=slot_id)
        self._session = session
        logger.info("Armed %s slot (session %d)", slot_id.value, session.session_id)

        await self._poll_once(session)
        if not session.closed:
            session.poll_task = asyncio.create_task(self._poll_loop(session))
        return session

    async def refresh(self) -> bool:
        """Manual poll for the live session. Returns True if a capture was delivered."""
        session = self._session
        if session is None:
            logger.debug("Refresh requested with no active session")
            return False
        return await self._poll_once(session)

    def cancel(self) -> None:
        """End the live session without a delivery (user backed out)."""
        self._teardown()

    def deactivate(self, slot_id: SlotId) -> None:
        slot_id = SlotId(slot_id)
        if self._session is not None and self._session.target_slot == slot_id:
            self._teardown()
        self.slots[slot_id].deactivate()

    async def close(self) -> None:
        """Dialog closed: stop polling and release the mailbox client."""
        if self._closed:
            return
        self._closed = True
        task = self._session.poll_task if self._session is not None else None
        self._teardown()
        if task is not None and task is not asyncio.current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.client.aclose()

    def deliver(self, session: SyncSession, capture: RawCapture) -> bool:
        """Write capture into the session's slot if the session is still current."""
        if session.closed or self._session is not session:
            logger.info(
                "Ignored capture for stale session %d (%s)",
                session.session_id,
                session.target_slot.value,
            )
            return False

        slot = self.slots[session.target_slot]
        if not slot.armed:
            logger.info("Ignored capture: %s slot is no longer armed", slot.slot_id.value)
            self._teardown()
            return False

        attributes = build_attribute_map(capture)
        media = capture.media
        slot.receive_capture(attributes, media)
        self._last_delivered = capture.timestamp
        if attributes:
            logger.info(
                "Delivered %d attribute(s) to %s slot: %s",
                len(attributes),
                slot.slot_id.value,
                ", ".join(sorted(attributes)),
            )
        else:
            logger.info("Delivered media without usable variants to %s slot", slot.slot_id.value)
        self._end(session)
        return True

    async def _poll_once(self, session: SyncSession) -> bool:
        try:
            capture = await self.client.poll()
        except MailboxUnreachable as exc:
            logger.warning("Mailbox poll failed, retrying next interval: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected mailbox poll error, retrying next interval")
            return False
        if capture is None:
            return False
        if capture.timestamp is not None and capture.timestamp == self._last_delivered:
            # The mailbox keeps serving a capture for a while after it is read.
            logger.debug("Skipped already delivered capture %s", capture.timestamp)
            return False
        return self.deliver(session, capture)

    async def _poll_loop(self, session: SyncSession) -> None:
        while not session.closed:
            await asyncio.sleep(self.config.poll_interval)
            if session.closed:
                break
            try:
                await self._poll_once(session)
            except Exception:
                logger.exception("Poll for session %d failed, retrying next interval", session.session_id)

    def _teardown(self) -> None:
        session = self._session
        if session is None:
            return
        self._end(session)
        slot = self.slots[session.target_slot]
        if slot.armed:
            slot.disarm()
            logger.info("Disarmed %s slot (session %d)", slot.slot_id.value, session.session_id)

    def _end(self, session: SyncSession) -> None:
        session.cancel()
        if self._session is session:
            self._session = None
