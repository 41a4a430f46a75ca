# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""In-process registry of transient binary blobs addressed by handle URLs.

A handle is the server-side counterpart of a browser object URL: it points
at bytes held in memory until it is revoked. Handles that sit in a named
slot are released only through `replace`, so a slot can never leak its
previous occupant.

Slot names are `<namespace>:<rest>`. A namespace that has not been touched
for `idle_ttl_seconds` belongs to a closed tab; its slots are emptied on the
next allocation.
"""

import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from common.analytics import get_logger
from common.error_handling import ResourceError
from config.default import Default

logger = get_logger(__name__)

HANDLE_PREFIX = "/blob/"


@dataclass
class _Blob:
    data: bytes
    mime_type: str


def handle_id(handle: str) -> str:
    """Strips the URL prefix from a handle."""
    if handle.startswith(HANDLE_PREFIX):
        return handle[len(HANDLE_PREFIX):]
    return handle


def slot_namespace(slot: str) -> str:
    return slot.partition(":")[0]


class ResourceHandleManager:
    """Allocates, tracks and revokes blob handles."""

    def __init__(
        self,
        idle_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_ttl_seconds = idle_ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._blobs: Dict[str, _Blob] = {}
        self._slots: Dict[str, str] = {}
        self._owners: Dict[str, str] = {}
        self._last_access: Dict[str, float] = {}
        self._revoked: set[str] = set()
        self.allocated_count = 0
        self.revoked_count = 0

    def allocate(self, data: bytes, mime_type: str = "application/octet-stream") -> str:
        """Stores `data` and returns a new handle for it."""
        handle = f"{HANDLE_PREFIX}{uuid.uuid4().hex}"
        with self._lock:
            self._sweep_locked()
            self._blobs[handle] = _Blob(data=data, mime_type=mime_type)
            self.allocated_count += 1
        logger.debug(f"Allocated {handle} ({len(data)} bytes, {mime_type})")
        return handle

    def revoke(self, handle: Optional[str]) -> None:
        """Releases a handle. Unknown or already revoked handles are ignored."""
        if not handle:
            return
        with self._lock:
            self._revoke_locked(handle)

    def _revoke_locked(self, handle: str) -> None:
        self._owners.pop(handle, None)
        blob = self._blobs.pop(handle, None)
        if blob is None:
            return
        if handle in self._revoked:
            raise ResourceError(f"Handle {handle} was live after being revoked.")
        self._revoked.add(handle)
        self.revoked_count += 1
        logger.debug(f"Revoked {handle}")

    def _touch_locked(self, namespace: str) -> None:
        self._last_access[namespace] = self.clock()

    def touch(self, namespace: str) -> None:
        """Marks a namespace as in use, postponing its eviction."""
        with self._lock:
            self._touch_locked(namespace)

    def _sweep_locked(self) -> None:
        if self.idle_ttl_seconds is None:
            return
        cutoff = self.clock() - self.idle_ttl_seconds
        idle = {ns for ns, seen in self._last_access.items() if seen < cutoff}
        if not idle:
            return
        for name in [name for name in self._slots if slot_namespace(name) in idle]:
            self._revoke_locked(self._slots.pop(name))
        for namespace in idle:
            del self._last_access[namespace]
        logger.info(f"Evicted handles of {len(idle)} idle session(s)")

    def replace(self, slot: str, new_handle: Optional[str]) -> Optional[str]:
        """Stores `new_handle` in `slot` and revokes the previous occupant.

        Passing None empties the slot. Returns the handle now in the slot.
        """
        namespace = slot_namespace(slot)
        with self._lock:
            self._touch_locked(namespace)
            previous = self._slots.pop(slot, None)
            if new_handle:
                self._slots[slot] = new_handle
                self._owners[new_handle] = namespace
            if previous and previous != new_handle:
                self._revoke_locked(previous)
        return new_handle

    def slot(self, slot: str) -> Optional[str]:
        with self._lock:
            return self._slots.get(slot)

    def clear_slots(self, prefix: str = "") -> int:
        """Empties every slot whose name starts with `prefix`."""
        with self._lock:
            names = [name for name in self._slots if name.startswith(prefix)]
        for name in names:
            self.replace(name, None)
        return len(names)

    def resolve(self, handle: str) -> Optional[Tuple[bytes, str]]:
        """Returns (data, mime_type) for a live handle, or None.

        Serving a slotted handle counts as activity in its namespace.
        """
        if not handle.startswith(HANDLE_PREFIX):
            handle = f"{HANDLE_PREFIX}{handle}"
        with self._lock:
            blob = self._blobs.get(handle)
            owner = self._owners.get(handle)
            if blob is not None and owner is not None:
                self._touch_locked(owner)
        if blob is None:
            return None
        return blob.data, blob.mime_type

    def is_live(self, handle: Optional[str]) -> bool:
        if not handle:
            return False
        with self._lock:
            return handle in self._blobs

    def outstanding(self) -> int:
        """Number of allocated handles that have not been revoked."""
        with self._lock:
            return len(self._blobs)


blob_store = ResourceHandleManager(idle_ttl_seconds=Default().HANDLE_IDLE_TTL_SECONDS)
