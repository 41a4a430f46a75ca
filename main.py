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
"""Serves the image studio: the Mesop UI plus the blob handle router."""

import logging
import os

import mesop as me
from fastapi import FastAPI
from fastapi.middleware.wsgi import WSGIMiddleware

from common.analytics import get_logger
from common.error_handling import UnknownHandlerIdFilter
from config.default import Default
from routers import blob_router

# Registers the "/" page with Mesop.
from workflows.image_studio import page as image_studio_page  # noqa: F401

logger = get_logger(__name__)

logging.getLogger().addFilter(UnknownHandlerIdFilter())

app = FastAPI(title=Default().APP_TITLE)
app.include_router(blob_router.router)


@app.get("/health")
def health():
    return {"status": "ok"}


app.mount(
    "/",
    WSGIMiddleware(
        me.create_wsgi_app(debug_mode=os.environ.get("DEBUG_MODE", "") == "true")
    ),
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8080)),
        reload=True,
        reload_includes=["*.py", "*.js"],
        timeout_graceful_shutdown=0,
    )
