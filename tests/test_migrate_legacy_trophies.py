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
Tests for the legacy trophy migration script.
"""

import importlib.util
from pathlib import Path
from unittest.mock import Mock

import pytest
from google.cloud.exceptions import Conflict  # type: ignore[import-untyped]

SCRIPT_PATH = Path(__file__).resolve().parent.parent / "scripts" / "migrate_legacy_trophies.py"
_spec = importlib.util.spec_from_file_location("migrate_legacy_trophies", SCRIPT_PATH)
migrate = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(migrate)


def make_snapshot(doc_id, data):
    snapshot = Mock()
    snapshot.id = doc_id
    snapshot.to_dict.return_value = data
    return snapshot


class TestLegacyToTrophyDocument:
    def test_converts_fields(self):
        document, reason = migrate.legacy_to_trophy_document(
            "u1", {"userId": "u1", "nomeUser": "  Ana  Maria ", "trofeus": 7}
        )
        assert reason is None
        assert document == {"userId": "u1", "displayName": "Ana Maria", "trophies": 7}

    def test_missing_user_id_uses_document_key(self):
        document, _ = migrate.legacy_to_trophy_document("u1", {"trofeus": 0})
        assert document == {"userId": "u1", "trophies": 0}

    def test_numeric_string_count(self):
        document, _ = migrate.legacy_to_trophy_document("u1", {"trofeus": "12"})
        assert document["trophies"] == 12

    @pytest.mark.parametrize(
        "legacy,reason_fragment",
        [
            ({"userId": "other", "trofeus": 1}, "does not match"),
            ({"userId": "u1"}, "missing"),
            ({"userId": "u1", "trofeus": "many"}, "not an integer"),
            ({"userId": "u1", "trofeus": -3}, "negative"),
        ],
    )
    def test_skipped_records(self, legacy, reason_fragment):
        document, reason = migrate.legacy_to_trophy_document("u1", legacy)
        assert document is None
        assert reason_fragment in reason


class TestMigrateDocument:
    def test_creates_target_document(self):
        db = Mock()
        target_ref = db.collection.return_value.document.return_value

        migrated, reason = migrate.migrate_document(
            db, make_snapshot("u1", {"nomeUser": "Ana", "trofeus": 2}), "trophies"
        )

        assert (migrated, reason) == (True, None)
        db.collection.assert_called_with("trophies")
        target_ref.create.assert_called_once_with(
            {"userId": "u1", "displayName": "Ana", "trophies": 2}
        )

    def test_existing_record_is_not_overwritten(self):
        db = Mock()
        target_ref = db.collection.return_value.document.return_value
        target_ref.create.side_effect = Conflict("already exists")

        migrated, reason = migrate.migrate_document(
            db, make_snapshot("u1", {"trofeus": 2}), "trophies"
        )

        assert migrated is False
        assert "already exists" in reason
        target_ref.set.assert_not_called()

    def test_dry_run_writes_nothing(self):
        db = Mock()
        target_ref = db.collection.return_value.document.return_value
        target_ref.get.return_value.exists = False

        migrated, _ = migrate.migrate_document(
            db, make_snapshot("u1", {"trofeus": 2}), "trophies", dry_run=True
        )

        assert migrated is True
        target_ref.create.assert_not_called()

    def test_invalid_legacy_record_is_skipped(self):
        db = Mock()

        migrated, reason = migrate.migrate_document(
            db, make_snapshot("u1", {"trofeus": -1}), "trophies"
        )

        assert migrated is False
        assert "negative" in reason
        db.collection.assert_not_called()


class TestProcessDocuments:
    def test_counts_migrated_documents(self):
        db = Mock()
        db.collection.return_value.stream.return_value = [
            make_snapshot("u1", {"trofeus": 1}),
            make_snapshot("u2", {"trofeus": -1}),
        ]

        total, migrated = migrate.process_documents(db, "trofeusUsuario", "trophies")

        assert (total, migrated) == (2, 1)

    def test_empty_collection(self):
        db = Mock()
        db.collection.return_value.stream.return_value = []

        assert migrate.process_documents(db, "trofeusUsuario", "trophies") == (0, 0)
