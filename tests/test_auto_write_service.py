import smtplib
from decimal import Decimal
from unittest import mock

from fastapi import BackgroundTasks
from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from helpers import DatabaseTestCase, TestingSessionLocal, make_auto, seed_autos

from auto_api.config import settings
from auto_api.models import Auto, AutoFile, Bild, Modell
from auto_api.schemas.auto import AutoCreateRequest, AutoUpdateRequest
from auto_api.services.auto_write_service import auto_write_service
from auto_api.utils import email
from auto_api.utils.exceptions import (
    NotFoundException, FgnrExistsException, VersionInvalidException,
    VersionOutdatedException, PreconditionRequiredException,
)

MAIL = "auto_api.services.auto_write_service.send_new_auto_email"


def create_request(fgnr="3-0000-1", modell="Polo", **kwargs) -> AutoCreateRequest:
    data = {
        "fgnr": fgnr,
        "art": "KOMBI",
        "preis": "12345.67",
        "rabatt": "0.05",
        "lieferbar": True,
        "datum": "2024-02-01",
        "schlagwoerter": ["SPORT", "KOMFORT"],
        "modell": {"modell": modell},
    }
    data.update(kwargs)
    return AutoCreateRequest(**data)


class TestCreate(DatabaseTestCase):

    @mock.patch(MAIL)
    def test_create(self, send_mail):
        auto_id = auto_write_service.create(self.db, create_request(
            bilder=[{"beschriftung": "Front", "contentType": "image/png"}],
        ))

        self.assertGreater(auto_id, 0)
        auto = self.db.get(Auto, auto_id)
        self.assertEqual(auto.version, 0)
        self.assertEqual(auto.preis, Decimal("12345.67"))
        self.assertEqual(auto.schlagwoerter, ["SPORT", "KOMFORT"])
        self.assertEqual(auto.modell.modell, "Polo")
        self.assertEqual([b.beschriftung for b in auto.bilder], ["Front"])
        send_mail.assert_called_once_with(auto_id, "Polo")

    @mock.patch(MAIL)
    def test_defaults_for_omitted_fields(self, send_mail):
        auto_id = auto_write_service.create(self.db, AutoCreateRequest(
            fgnr="3-0000-2", preis="1", modell={"modell": "Up"},
        ))
        auto = self.db.get(Auto, auto_id)
        self.assertEqual(auto.rabatt, Decimal("0"))
        self.assertFalse(auto.lieferbar)
        self.assertIsNone(auto.art)

    @mock.patch(MAIL)
    def test_duplicate_fgnr(self, send_mail):
        make_auto(self.db, "3-0000-1", "Golf")

        with self.assertRaises(FgnrExistsException) as ctx:
            auto_write_service.create(self.db, create_request())

        self.assertEqual(ctx.exception.status_code, 422)
        self.assertEqual(self.db.query(Auto).count(), 1)
        self.assertEqual(self.db.query(Modell).count(), 1)
        send_mail.assert_not_called()

    @mock.patch(MAIL)
    def test_unique_violation_on_commit_is_translated(self, send_mail):
        make_auto(self.db, "3-0000-1", "Golf")

        # the pre-check misses a row inserted concurrently
        with mock.patch.object(auto_write_service, "_validate_create"):
            with self.assertRaises(FgnrExistsException):
                auto_write_service.create(self.db, create_request())

        self.assertEqual(self.db.query(Auto).count(), 1)

    @mock.patch(MAIL)
    def test_mail_runs_as_background_task(self, send_mail):
        tasks = BackgroundTasks()
        auto_id = auto_write_service.create(self.db, create_request(), tasks)

        self.assertEqual(len(tasks.tasks), 1)
        self.assertEqual(tasks.tasks[0].args, (auto_id, "Polo"))
        send_mail.assert_not_called()

    def test_failing_mail_server_does_not_fail_create(self):
        with mock.patch.object(settings, "MAIL_ENABLED", True), \
             mock.patch.object(email.smtplib, "SMTP", side_effect=OSError("connection refused")):
            auto_id = auto_write_service.create(self.db, create_request())

        self.assertIsNotNone(self.db.get(Auto, auto_id))

    def test_tags_with_comma_or_empty_are_rejected(self):
        for tags in (["A,B"], ["A", "A,B"], [""]):
            with self.subTest(tags=tags):
                with self.assertRaises(ValidationError):
                    create_request(schlagwoerter=tags)

    @mock.patch(MAIL)
    def test_tags_read_back_unchanged(self, send_mail):
        auto_id = auto_write_service.create(self.db, create_request(schlagwoerter=["PYTHON", "SPORT"]))
        with TestingSessionLocal() as other:
            self.assertEqual(other.get(Auto, auto_id).schlagwoerter, ["PYTHON", "SPORT"])

    def test_send_new_auto_email_reports_failure(self):
        with mock.patch.object(settings, "MAIL_ENABLED", True), \
             mock.patch.object(email.smtplib, "SMTP", side_effect=smtplib.SMTPException("boom")):
            self.assertFalse(email.send_new_auto_email(1, "Polo"))

    def test_send_new_auto_email_logs_when_disabled(self):
        with mock.patch.object(email.smtplib, "SMTP") as smtp:
            self.assertTrue(email.send_new_auto_email(1, "Polo"))
        smtp.assert_not_called()


class TestUpdate(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.autos = seed_autos(self.db)
        self.bmw = self.autos["BMW"]

    def _request(self, **kwargs) -> AutoUpdateRequest:
        data = {"fgnr": self.bmw.fgnr, "preis": "29999.99"}
        data.update(kwargs)
        return AutoUpdateRequest(**data)

    def test_update_bumps_version(self):
        version = auto_write_service.update(self.db, self.bmw.id, self._request(), '"0"')
        self.assertEqual(version, 1)

        version = auto_write_service.update(self.db, self.bmw.id, self._request(preis="1"), '"1"')
        self.assertEqual(version, 2)
        self.assertEqual(self.db.get(Auto, self.bmw.id).preis, Decimal("1.00"))

    def test_partial_update_keeps_omitted_fields(self):
        auto_write_service.update(self.db, self.bmw.id, self._request(art="LIMO"), '"0"')

        auto = self.db.get(Auto, self.bmw.id)
        self.assertEqual(auto.art.value, "LIMO")
        self.assertEqual(auto.rabatt, Decimal("0.100"))
        self.assertTrue(auto.lieferbar)
        self.assertEqual(auto.schlagwoerter, ["SPORT"])
        self.assertEqual(auto.modell.modell, "BMW")

    def test_outdated_version(self):
        auto_write_service.update(self.db, self.bmw.id, self._request(), '"0"')

        with self.assertRaises(VersionOutdatedException) as ctx:
            auto_write_service.update(self.db, self.bmw.id, self._request(preis="5"), '"0"')
        self.assertEqual(ctx.exception.status_code, 412)
        self.assertEqual(self.db.get(Auto, self.bmw.id).preis, Decimal("29999.99"))

    def test_newer_version_is_accepted(self):
        version = auto_write_service.update(self.db, self.bmw.id, self._request(), '"7"')
        self.assertEqual(version, 1)

    def test_concurrent_update_is_outdated(self):
        # another writer bumped the row after it was read into this session
        self.db.execute(update(Auto.__table__).where(Auto.__table__.c.id == self.bmw.id).values(version=3))
        self.db.commit()

        with self.assertRaises(VersionOutdatedException):
            auto_write_service.update(self.db, self.bmw.id, self._request(), '"0"')

    def test_invalid_versions_touch_no_database(self):
        for token in ("0", '"-1"', '"abc"', '""', '"1234"', 'W/"1"', '"0"\n', ' "0"'):
            with self.subTest(token=token):
                db = mock.MagicMock(spec=Session)
                with self.assertRaises(VersionInvalidException):
                    auto_write_service.update(db, self.bmw.id, self._request(), token)
                db.query.assert_not_called()
                db.execute.assert_not_called()

    def test_missing_version(self):
        with self.assertRaises(PreconditionRequiredException) as ctx:
            auto_write_service.update(self.db, self.bmw.id, self._request(), None)
        self.assertEqual(ctx.exception.status_code, 428)

    def test_missing_id(self):
        with self.assertRaises(NotFoundException):
            auto_write_service.update(self.db, None, self._request(), '"0"')

    def test_unknown_id(self):
        with self.assertRaises(NotFoundException):
            auto_write_service.update(self.db, 999, self._request(), '"0"')

    def test_duplicate_fgnr(self):
        audi = self.autos["Audi"]
        with self.assertRaises(FgnrExistsException):
            auto_write_service.update(self.db, self.bmw.id, self._request(fgnr=audi.fgnr), '"0"')

        with TestingSessionLocal() as other:
            self.assertEqual(other.get(Auto, self.bmw.id).fgnr, "1-0001-1")


class TestDelete(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.auto = make_auto(self.db, "4-0000-1", "Golf", bilder=2)
        self.keep = make_auto(self.db, "4-0000-2", "Polo", bilder=1)
        self.db.add(AutoFile(autoId=self.auto.id, filename="golf.pdf", mimetype="application/pdf", data=b"%PDF"))
        self.db.commit()

    def test_delete_cascades(self):
        self.assertTrue(auto_write_service.delete(self.db, self.auto.id))

        with TestingSessionLocal() as other:
            self.assertIsNone(other.get(Auto, self.auto.id))
            self.assertEqual(other.query(Modell).count(), 1)
            self.assertEqual(other.query(Bild).count(), 1)
            self.assertEqual(other.query(AutoFile).count(), 0)
            self.assertIsNotNone(other.get(Auto, self.keep.id))

    def test_unknown_id(self):
        with self.assertRaises(NotFoundException):
            auto_write_service.delete(self.db, 999)

    def test_failure_rolls_back_everything(self):
        execute = self.db.execute
        bild_deletes = []

        def failing_execute(stmt, *args, **kwargs):
            if getattr(stmt, "is_delete", False) and str(stmt).startswith("DELETE FROM bild"):
                bild_deletes.append(stmt)
                if len(bild_deletes) == 2:
                    raise RuntimeError("connection lost")
            return execute(stmt, *args, **kwargs)

        with mock.patch.object(self.db, "execute", side_effect=failing_execute):
            with self.assertRaises(RuntimeError):
                auto_write_service.delete(self.db, self.auto.id)

        with TestingSessionLocal() as other:
            self.assertIsNotNone(other.get(Auto, self.auto.id))
            self.assertEqual(other.query(Modell).count(), 2)
            self.assertEqual(other.query(Bild).count(), 3)
            self.assertEqual(other.query(AutoFile).count(), 1)


class TestAddFile(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.auto = make_auto(self.db, "5-0000-1", "Golf")

    def test_add_and_replace(self):
        auto_write_service.add_file(self.db, self.auto.id, b"one", "a.txt", "text/plain")
        auto_file = auto_write_service.add_file(self.db, self.auto.id, b"two", "b.png", "image/png")

        self.assertEqual(auto_file.filename, "b.png")
        files = self.db.scalars(select(AutoFile)).all()
        self.assertEqual(len(files), 1)
        self.assertEqual(files[0].data, b"two")

    def test_version_is_unchanged(self):
        auto_write_service.add_file(self.db, self.auto.id, b"one", "a.txt", "text/plain")
        with TestingSessionLocal() as other:
            self.assertEqual(other.get(Auto, self.auto.id).version, 0)

    def test_unknown_auto(self):
        with self.assertRaises(NotFoundException):
            auto_write_service.add_file(self.db, 999, b"x", "x.txt", "text/plain")
