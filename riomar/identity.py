# Copyright 2025 John Brosnihan
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
"""
Caller identity resolution.

The service never authenticates anyone itself. An upstream identity provider
(the gateway in front of Cloud Run) verifies the caller and forwards the user
id; resolvers only read it.
"""

from typing import Mapping, Optional, Protocol


def normalize_user_id(user_id: Optional[str]) -> Optional[str]:
    """
    Strip surrounding whitespace; blank or missing ids mean "unauthenticated".

    Examples:
        >>> normalize_user_id("  u1 ")
        'u1'
        >>> normalize_user_id("   ") is None
        True
    """
    if user_id is None:
        return None
    user_id = user_id.strip()
    return user_id or None


class IdentityResolver(Protocol):
    def current_user_id(self) -> Optional[str]:
        """Return the authenticated user id, or None when unauthenticated."""
        ...


class StaticIdentityResolver:
    """Resolves to a fixed user id. Used by scripts and tests."""

    def __init__(self, user_id: Optional[str]):
        self._user_id = normalize_user_id(user_id)

    def current_user_id(self) -> Optional[str]:
        return self._user_id


class HeaderIdentityResolver:
    """
    Resolves the caller from a request header set by the identity gateway.

    Args:
        headers: Request headers (Starlette headers are case-insensitive)
        header_name: Header carrying the user id, e.g. "X-User-Id"
    """

    def __init__(self, headers: Mapping[str, str], header_name: str):
        self._headers = headers
        self._header_name = header_name

    def current_user_id(self) -> Optional[str]:
        return normalize_user_id(self._headers.get(self._header_name))
