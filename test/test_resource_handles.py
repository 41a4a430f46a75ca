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
import pytest

from common.error_handling import ResourceError
from common.resource_handles import HANDLE_PREFIX, ResourceHandleManager, _Blob, handle_id


def test_allocate_and_resolve():
    manager = ResourceHandleManager()
    handle = manager.allocate(b"png", "image/png")

    assert handle.startswith(HANDLE_PREFIX)
    assert manager.resolve(handle) == (b"png", "image/png")
    assert manager.resolve(handle_id(handle)) == (b"png", "image/png")
    assert manager.is_live(handle)
    assert manager.outstanding() == 1


def test_revoke_is_idempotent():
    manager = ResourceHandleManager()
    handle = manager.allocate(b"png")

    manager.revoke(handle)
    manager.revoke(handle)
    manager.revoke(None)
    manager.revoke("/blob/unknown")

    assert manager.resolve(handle) is None
    assert manager.revoked_count == 1
    assert manager.outstanding() == 0


def test_replace_revokes_previous_occupant():
    manager = ResourceHandleManager()
    first = manager.replace("video", manager.allocate(b"one"))
    second = manager.replace("video", manager.allocate(b"two"))

    assert manager.slot("video") == second
    assert not manager.is_live(first)
    assert manager.is_live(second)


def test_replace_with_same_handle_keeps_it():
    manager = ResourceHandleManager()
    handle = manager.replace("video", manager.allocate(b"one"))
    manager.replace("video", handle)

    assert manager.is_live(handle)
    assert manager.revoked_count == 0


def test_replace_with_none_empties_slot():
    manager = ResourceHandleManager()
    handle = manager.replace("video", manager.allocate(b"one"))

    assert manager.replace("video", None) is None
    assert manager.slot("video") is None
    assert not manager.is_live(handle)


def test_clear_slots_by_prefix():
    manager = ResourceHandleManager()
    for slot in ("s1:upload:a", "s1:upload:b", "s1:processed:a", "s2:upload:a"):
        manager.replace(slot, manager.allocate(slot.encode()))

    assert manager.clear_slots("s1:upload:") == 2
    assert manager.slot("s1:processed:a") is not None
    assert manager.slot("s2:upload:a") is not None
    assert manager.outstanding() == 2


def test_revoked_handle_reappearing_is_an_error():
    manager = ResourceHandleManager()
    handle = manager.allocate(b"one")
    manager.revoke(handle)
    # Corrupt the bookkeeping so the revoked handle is live again.
    manager._blobs[handle] = _Blob(data=b"one", mime_type="application/octet-stream")

    with pytest.raises(ResourceError):
        manager.revoke(handle)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_abandoned_namespace_is_evicted_on_next_allocation():
    clock = FakeClock()
    manager = ResourceHandleManager(idle_ttl_seconds=60, clock=clock)
    abandoned = [manager.replace(f"closed-tab:upload:{n}", manager.allocate(b"img")) for n in range(3)]
    clock.now = 30
    active = manager.replace("open-tab:upload:a", manager.allocate(b"img"))

    clock.now = 70
    manager.allocate(b"trigger")

    assert not any(manager.is_live(handle) for handle in abandoned)
    assert manager.slot("closed-tab:upload:0") is None
    assert manager.is_live(active)
    assert manager.outstanding() == 2


def test_touch_and_serving_keep_a_namespace_alive():
    clock = FakeClock()
    manager = ResourceHandleManager(idle_ttl_seconds=60, clock=clock)
    touched = manager.replace("s1:video", manager.allocate(b"mp4"))
    served = manager.replace("s2:video", manager.allocate(b"mp4"))

    clock.now = 50
    manager.touch("s1")
    assert manager.resolve(served) == (b"mp4", "application/octet-stream")

    clock.now = 100
    manager.allocate(b"trigger")

    assert manager.is_live(touched)
    assert manager.is_live(served)


def test_no_eviction_without_ttl():
    clock = FakeClock()
    manager = ResourceHandleManager(clock=clock)
    handle = manager.replace("s1:video", manager.allocate(b"mp4"))

    clock.now = 10 ** 9
    manager.allocate(b"trigger")

    assert manager.is_live(handle)
