import unittest
from flask import Flask

from docdesk.extensions import db
from docdesk.models import CompanySettings, LedgerRecord
from docdesk.services import settings_service, storage_service
from docdesk.services.storage_service import (
    CLIENTS_KEY,
    DOCUMENTS_KEY,
    INVENTORY_KEY,
    SETTINGS_KEY,
)


class LedgerStoreTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = Flask(__name__)
        cls.app.config.update(
            SECRET_KEY="test",
            SQLALCHEMY_DATABASE_URI="sqlite:///:memory:",
            SQLALCHEMY_TRACK_MODIFICATIONS=False,
            TESTING=True,
        )
        db.init_app(cls.app)
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        from docdesk import models  # noqa: F401
        db.create_all()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        db.session.query(LedgerRecord).delete()
        db.session.commit()

    def _seed_clients(self):
        for i in range(1, 4):
            storage_service.upsert_entry(CLIENTS_KEY, {"id": f"c{i}", "name": f"Client {i}"})

    def test_unwritten_collection_reads_default(self):
        self.assertIsNone(storage_service.read_collection(DOCUMENTS_KEY))
        self.assertEqual(storage_service.list_entries(DOCUMENTS_KEY), [])

    def test_each_collection_is_one_record(self):
        self._seed_clients()
        storage_service.upsert_entry(INVENTORY_KEY, {"id": "p1", "code": "A"})

        keys = sorted(r.key for r in db.session.query(LedgerRecord).all())
        self.assertEqual(keys, [CLIENTS_KEY, INVENTORY_KEY])

    def test_upsert_appends_then_replaces_in_place(self):
        self._seed_clients()
        storage_service.upsert_entry(CLIENTS_KEY, {"id": "c2", "name": "Renamed"})

        entries = storage_service.list_entries(CLIENTS_KEY)
        self.assertEqual([e["id"] for e in entries], ["c1", "c2", "c3"])
        self.assertEqual(entries[1]["name"], "Renamed")

    def test_upsert_requires_id(self):
        with self.assertRaises(ValueError):
            storage_service.upsert_entry(CLIENTS_KEY, {"name": "No id"})

    def test_delete_removes_exactly_one(self):
        self._seed_clients()

        self.assertTrue(storage_service.delete_entry(CLIENTS_KEY, "c2"))

        entries = storage_service.list_entries(CLIENTS_KEY)
        self.assertEqual(entries, [{"id": "c1", "name": "Client 1"}, {"id": "c3", "name": "Client 3"}])

    def test_delete_unknown_id_changes_nothing(self):
        self._seed_clients()
        version = db.session.query(LedgerRecord).filter_by(key=CLIENTS_KEY).one().version_id

        self.assertFalse(storage_service.delete_entry(CLIENTS_KEY, "missing"))

        record = db.session.query(LedgerRecord).filter_by(key=CLIENTS_KEY).one()
        self.assertEqual(record.version_id, version)
        self.assertEqual(len(record.value), 3)

    def test_reads_are_private_copies(self):
        self._seed_clients()

        entries = storage_service.list_entries(CLIENTS_KEY)
        entries[0]["name"] = "Mutated"
        entries.append({"id": "c9"})

        fresh = storage_service.list_entries(CLIENTS_KEY)
        self.assertEqual(len(fresh), 3)
        self.assertEqual(fresh[0]["name"], "Client 1")

    def test_write_bumps_version(self):
        storage_service.write_collection(SETTINGS_KEY, {"name": "A"})
        first = db.session.query(LedgerRecord).filter_by(key=SETTINGS_KEY).one().version_id

        storage_service.write_collection(SETTINGS_KEY, {"name": "B"})
        second = db.session.query(LedgerRecord).filter_by(key=SETTINGS_KEY).one().version_id

        self.assertEqual(second, first + 1)

    def test_unknown_collection_key_rejected(self):
        with self.assertRaises(ValueError):
            storage_service.write_collection("other", [])

    def test_settings_merge_saved_values_over_defaults(self):
        storage_service.write_collection(SETTINGS_KEY, {"name": "Casa Nova", "next_delivery_number": 12})

        settings = settings_service.get_settings()

        self.assertEqual(settings.name, "Casa Nova")
        self.assertEqual(settings.next_delivery_number, 12)
        self.assertEqual(settings.next_quote_number, 1)
        self.assertEqual(settings.default_tax_rate, 16)
        self.assertEqual(settings.currency_symbol, "$")

    def test_settings_ignore_unknown_stored_keys(self):
        storage_service.write_collection(SETTINGS_KEY, {"legacy_field": True})

        self.assertEqual(settings_service.get_settings(), CompanySettings())

    def test_ensure_settings_is_idempotent(self):
        settings_service.ensure_settings()
        storage_service.write_collection(SETTINGS_KEY, {"next_quote_number": 5})

        settings = settings_service.ensure_settings()

        self.assertEqual(settings.next_quote_number, 5)


if __name__ == "__main__":
    unittest.main()
