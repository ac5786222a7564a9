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
Exceptions raised by the document store layer.

These never leave the ledger, POI store or leaderboard: each component
catches them at its boundary and reports a plain failure value.
"""


class StoreError(Exception):
    """Base class for document store errors."""


class DocumentNotFoundError(StoreError):
    """A field-level update targeted a document that does not exist."""

    def __init__(self, collection: str, key: str):
        super().__init__(f"Document '{key}' not found in collection '{collection}'")
        self.collection = collection
        self.key = key


class NegativeTrophyBalanceError(StoreError):
    """An increment would have left a user with fewer than zero trophies."""

    def __init__(self, user_id: str, current: int, delta: int):
        super().__init__(
            f"Applying delta {delta} to {current} trophies for user '{user_id}' "
            "would produce a negative balance"
        )
        self.user_id = user_id
        self.current = current
        self.delta = delta
