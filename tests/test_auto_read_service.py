from helpers import DatabaseTestCase, make_auto, seed_autos

from auto_api.models import AutoFile
from auto_api.services.auto_read_service import auto_read_service, serialize_auto
from auto_api.services.pageable import Pageable
from auto_api.utils.exceptions import InvalidCriteriaException, NotFoundException


class TestFindById(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.autos = seed_autos(self.db)

    def test_existing_auto(self):
        bmw = self.autos["BMW"]
        auto = auto_read_service.find_by_id(self.db, bmw.id)
        self.assertEqual(auto.fgnr, "1-0001-1")
        self.assertEqual(auto.modell.modell, "BMW")
        self.assertEqual(auto.version, 0)

    def test_missing_auto(self):
        with self.assertRaises(NotFoundException) as ctx:
            auto_read_service.find_by_id(self.db, 999)
        self.assertEqual(ctx.exception.message, "No auto with id 999")
        self.assertNotIsInstance(ctx.exception, InvalidCriteriaException)

    def test_missing_tags_read_as_empty_list(self):
        trabant = self.autos["Trabant"]
        auto = auto_read_service.find_by_id(self.db, trabant.id)
        self.assertEqual(auto.schlagwoerter, [])
        self.assertFalse(self.db.is_modified(auto))

    def test_with_bilder(self):
        auto = make_auto(self.db, "2-0000-1", "Golf", bilder=2)
        found = auto_read_service.find_by_id(self.db, auto.id, mit_bilder=True)
        self.assertEqual([b.beschriftung for b in found.bilder], ["Bild 0", "Bild 1"])

        data = serialize_auto(found, mit_bilder=True)
        self.assertEqual(data["bilder"][0]["contentType"], "image/png")
        self.assertNotIn("bilder", serialize_auto(found))


class TestFind(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.autos = seed_autos(self.db)

    def test_without_criteria_returns_first_page(self):
        result = auto_read_service.find(self.db, {}, Pageable(number=0, size=2))
        self.assertEqual([a.modell.modell for a in result.content], ["BMW", "Mercedes"])
        self.assertEqual(result.total_elements, 5)

    def test_page_beyond_end_is_not_found(self):
        with self.assertRaises(NotFoundException) as ctx:
            auto_read_service.find(self.db, None, Pageable(number=10, size=5))
        self.assertEqual(ctx.exception.message, 'Invalid page "10"')

    def test_total_counts_all_matches(self):
        result = auto_read_service.find(self.db, {"art": "LIMO"}, Pageable(number=0, size=1))
        self.assertEqual(len(result.content), 1)
        self.assertEqual(result.total_elements, 2)

    def test_unpaged(self):
        result = auto_read_service.find(self.db, {"preis": "40000"}, Pageable(number=0, size=0))
        self.assertEqual(len(result.content), 3)
        self.assertEqual(result.total_elements, 3)

    def test_no_match_is_not_found(self):
        with self.assertRaises(NotFoundException) as ctx:
            auto_read_service.find(self.db, {"modell": "Lada"}, Pageable(number=0, size=5))
        self.assertNotIsInstance(ctx.exception, InvalidCriteriaException)
        self.assertIn("Lada", ctx.exception.message)

    def test_unknown_key_is_invalid(self):
        with self.assertRaises(InvalidCriteriaException):
            auto_read_service.find(self.db, {"farbe": "rot"}, Pageable(number=0, size=5))

    def test_illegal_art_is_invalid(self):
        with self.assertRaises(InvalidCriteriaException):
            auto_read_service.find(self.db, {"art": "CABRIO"}, Pageable(number=0, size=5))

    def test_tags_are_normalized_without_dirtying(self):
        result = auto_read_service.find(self.db, {"modell": "Trabant"}, Pageable(number=0, size=5))
        self.assertEqual(result.content[0].schlagwoerter, [])
        self.assertEqual(len(self.db.dirty), 0)


class TestFindFile(DatabaseTestCase):

    def test_no_file(self):
        auto = make_auto(self.db, "2-0000-1", "Golf")
        self.assertIsNone(auto_read_service.find_file_by_auto_id(self.db, auto.id))

    def test_existing_file(self):
        auto = make_auto(self.db, "2-0000-1", "Golf")
        self.db.add(AutoFile(autoId=auto.id, filename="golf.png", mimetype="image/png", data=b"\x89PNG"))
        self.db.commit()

        auto_file = auto_read_service.find_file_by_auto_id(self.db, auto.id)
        self.assertEqual(auto_file.filename, "golf.png")
        self.assertEqual(auto_file.data, b"\x89PNG")
