import logging
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from auto_api.models.auto import Auto
from auto_api.models.auto_file import AutoFile
from auto_api.services import suchkriterien as criteria_validator
from auto_api.services.pageable import Pageable, Slice
from auto_api.services.query_builder import QueryBuilder, query_builder
from auto_api.services.suchkriterien import Suchkriterien
from auto_api.utils.exceptions import NotFoundException, InvalidCriteriaException

logger = logging.getLogger(__name__)


def serialize_auto(a: Auto, mit_bilder: bool = False) -> dict:
    data = {
        "id":            a.id,
        "version":       a.version,
        "fgnr":          a.fgnr,
        "art":           a.art.value if a.art else None,
        "preis":         a.preis,
        "rabatt":        a.rabatt,
        "lieferbar":     a.lieferbar,
        "datum":         a.datum.isoformat() if a.datum else None,
        "schlagwoerter": a.schlagwoerter if a.schlagwoerter is not None else [],
        "modell":        {"id": a.modell.id, "modell": a.modell.modell} if a.modell else None,
        "erzeugt":       a.erzeugt.isoformat() if a.erzeugt else None,
        "aktualisiert":  a.aktualisiert.isoformat() if a.aktualisiert else None,
    }
    if mit_bilder:
        data["bilder"] = [
            {"id": b.id, "beschriftung": b.beschriftung, "contentType": b.contentType}
            for b in a.bilder
        ]
    return data


def _normalize_tags(auto: Auto) -> Auto:
    if auto.schlagwoerter is None:
        # no history: reading must not make the row dirty
        set_committed_value(auto, "schlagwoerter", [])
    return auto


class AutoReadService:

    def __init__(self, builder: QueryBuilder = query_builder):
        self._builder = builder

    def find_by_id(self, db: Session, auto_id: int, mit_bilder: bool = False) -> Auto:
        logger.debug(f"find_by_id: id={auto_id}, mit_bilder={mit_bilder}")
        auto = self._builder.build_id(db, auto_id, mit_bilder=mit_bilder).first()
        if auto is None:
            raise NotFoundException(f"No auto with id {auto_id}")
        return _normalize_tags(auto)

    def find_file_by_auto_id(self, db: Session, auto_id: int) -> AutoFile | None:
        logger.debug(f"find_file_by_auto_id: auto_id={auto_id}")
        auto_file = db.query(AutoFile).filter(AutoFile.autoId == auto_id).first()
        if auto_file is None:
            logger.debug("find_file_by_auto_id: no file found")
            return None
        logger.debug(f"find_file_by_auto_id: filename={auto_file.filename}")
        return auto_file

    def find(self, db: Session, suchkriterien: Suchkriterien | None, pageable: Pageable) -> Slice:
        """
        Search autos. No criteria means "all autos" (still paginated).

        Raises InvalidCriteriaException for unknown keys or an illegal ``art``,
        NotFoundException when the search matches nothing on this page.
        """
        logger.debug(f"find: suchkriterien={suchkriterien}, pageable={pageable}")

        if not suchkriterien:
            return self._find_all(db, pageable)

        if not criteria_validator.validate(suchkriterien):
            raise InvalidCriteriaException()

        q = self._builder.build(db, suchkriterien, pageable)
        autos = q.all()
        if not autos:
            logger.debug("find: no autos found")
            raise NotFoundException(
                f"No autos found: {dict(suchkriterien)}, page {pageable.number}"
            )
        return self._create_slice(autos, self._count(q))

    def _find_all(self, db: Session, pageable: Pageable) -> Slice:
        q = self._builder.build(db, {}, pageable)
        autos = q.all()
        if not autos:
            raise NotFoundException(f'Invalid page "{pageable.number}"')
        return self._create_slice(autos, self._count(q))

    @staticmethod
    def _count(q) -> int:
        # total of the whole matching set, not just the current page
        return q.limit(None).offset(None).order_by(None).count()

    @staticmethod
    def _create_slice(autos: list[Auto], total_elements: int) -> Slice:
        for auto in autos:
            _normalize_tags(auto)
        logger.debug(f"create_slice: size={len(autos)}, total_elements={total_elements}")
        return Slice(content=autos, total_elements=total_elements)


auto_read_service = AutoReadService()
