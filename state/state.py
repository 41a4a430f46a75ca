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

import uuid
from dataclasses import field

import mesop as me


@me.stateclass
class AppState:
    """Mesop Application State"""

    # pylint: disable=E3701:invalid-field-call

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    current_page: str = "/"
    theme_mode: str = "dark"
