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

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Response

from common.resource_handles import blob_store

router = APIRouter(prefix="/blob", tags=["blob"])


@router.get("/{handle_id}")
async def get_blob(handle_id: str, download: Optional[str] = None):
    """
    Serves the bytes behind a live resource handle.
    Revoked or unknown handles return 404.
    """
    resolved = blob_store.resolve(handle_id)
    if resolved is None:
        raise HTTPException(status_code=404, detail="Handle not found or revoked")

    data, mime_type = resolved
    headers = {"Cache-Control": "no-store"}
    if download:
        headers["Content-Disposition"] = f"attachment; filename*=UTF-8''{quote(download, safe='')}"
    return Response(content=data, media_type=mime_type, headers=headers)
