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
from fastapi import FastAPI
from fastapi.testclient import TestClient

from common.resource_handles import blob_store, handle_id
from routers import blob_router

app = FastAPI()
app.include_router(blob_router.router)
client = TestClient(app)


def test_serves_live_handle():
    handle = blob_store.allocate(b"png-bytes", "image/png")
    try:
        response = client.get(handle)
        assert response.status_code == 200
        assert response.content == b"png-bytes"
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "no-store"
        assert "content-disposition" not in response.headers
    finally:
        blob_store.revoke(handle)


def test_download_sets_attachment_filename():
    handle = blob_store.allocate(b"mp4", "video/mp4")
    try:
        response = client.get(f"/blob/{handle_id(handle)}", params={"download": "ai-video-1.mp4"})
        assert response.headers["content-disposition"] == "attachment; filename*=UTF-8''ai-video-1.mp4"
    finally:
        blob_store.revoke(handle)


def test_revoked_handle_is_not_found():
    handle = blob_store.allocate(b"gone")
    blob_store.revoke(handle)

    assert client.get(handle).status_code == 404


def test_download_filename_is_percent_encoded():
    handle = blob_store.allocate(b"png", "image/png")
    try:
        response = client.get(handle, params={"download": 'processed-my "best" shot.png'})
        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            "attachment; filename*=UTF-8''processed-my%20%22best%22%20shot.png"
        )
    finally:
        blob_store.revoke(handle)
