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

import logging

# Dedicated logger for tracking the suppressed error
race_condition_logger = logging.getLogger("studio.race_condition_tracker")


class StudioError(Exception):
    """Base class for errors raised by the studio workflow."""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class InvalidRequestError(StudioError):
    """A precondition was not met. No remote call was issued."""


class BusyError(InvalidRequestError):
    """Another remote operation is still in flight."""


class ServiceError(StudioError):
    """The generation backend failed or returned no usable payload."""


class TransportError(StudioError):
    """The backend, or media derived from it, could not be reached."""


class ResourceError(StudioError):
    """Resource handle bookkeeping is inconsistent. Indicates a bug."""


class UnknownHandlerIdFilter(logging.Filter):
    """A logging filter to suppress 'Unknown handler id' errors."""

    def filter(self, record):
        # Suppress the specific benign error message from Mesop
        if "Unknown handler id" in record.getMessage():
            race_condition_logger.info(
                "Suppressed 'Unknown handler id' error",
                extra={"original_record": record.getMessage()},
            )
            return False
        return True
