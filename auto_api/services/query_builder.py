import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from sqlalchemy import String, and_, not_, type_coerce
from sqlalchemy.orm import Query, Session, contains_eager, selectinload

from auto_api.config import settings
from auto_api.models.auto import Auto, AutoArt
from auto_api.models.modell import Modell
from auto_api.services.pageable import Pageable
from auto_api.services.suchkriterien import Suchkriterien
from auto_api.utils.exceptions import InvalidCriteriaException

logger = logging.getLogger(__name__)


# ─── Value converters ─────────────────────────────────────────────────────────
# id and version are INTEGER columns
INT_MIN, INT_MAX = -(2**31), 2**31 - 1


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(value)
    result = int(value)
    if not INT_MIN <= result <= INT_MAX:
        raise ValueError(value)
    return result


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(value)
    # str() first so a float 0.1 stays 0.1
    result = Decimal(str(value).strip())
    if not result.is_finite():
        raise ValueError(value)
    return result


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(value)


def _to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


# % and _ in a search value match literally
def _escape_like(value: Any) -> str:
    return str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_true(value: Any) -> bool:
    return value is True or value == "true"


# ─── Predicates ───────────────────────────────────────────────────────────────
def _tags():
    # compare against the serialized "A,B,C" form, not the list type
    return type_coerce(Auto.schlagwoerter, String)


def _tag_contains(tag: str):
    return lambda: _tags().like(f"%{tag}%")


def _komfort():
    # off-road vehicles never count as comfort class, even when tagged KOMFORT
    return and_(_tags().like("%KOMFORT%"), not_(_tags().like("%GELAENDE%")))


TAG_PREDICATES: dict[str, Callable] = {
    "gelaende": _tag_contains("GELAENDE"),
    "sport":    _tag_contains("SPORT"),
    "komfort":  _komfort,
    "python":   _tag_contains("PYTHON"),
}

EQUALITY_PREDICATES: dict[str, Callable[[Any], Any]] = {
    "id":        lambda v: Auto.id == _to_int(v),
    "version":   lambda v: Auto.version == _to_int(v),
    "fgnr":      lambda v: Auto.fgnr == str(v),
    "art":       lambda v: Auto.art == AutoArt(v),
    "rabatt":    lambda v: Auto.rabatt == _to_decimal(v),
    "lieferbar": lambda v: Auto.lieferbar == _to_bool(v),
    "datum":     lambda v: Auto.datum == _to_date(v),
}


class QueryBuilder:
    """
    Builds (but never executes) SQLAlchemy queries for autos.
    Every query inner-joins Modell; the Modell row is fetched with the Auto.
    """

    def _base(self, db: Session) -> Query:
        return db.query(Auto).join(Auto.modell).options(contains_eager(Auto.modell))

    def build_id(self, db: Session, auto_id: int, mit_bilder: bool = False) -> Query:
        q = self._base(db)
        if mit_bilder:
            q = q.options(selectinload(Auto.bilder))
        return q.filter(Auto.id == auto_id)

    def build(self, db: Session, suchkriterien: Suchkriterien | None, pageable: Pageable | None) -> Query:
        """
        Translate a criteria mapping into a filtered, paginated query.

        modell      case-insensitive substring of the model name
        preis       price <= value
        gelaende, sport, komfort, python
                    "true" adds a tag filter; komfort ignores GELAENDE-tagged autos
        other keys  equality on the Auto column of that name (allow-listed)

        pageable.size == 0 returns the query without limit/offset.
        """
        criteria = dict(suchkriterien or {})
        logger.debug(f"build: suchkriterien={criteria}, pageable={pageable}")

        q = self._base(db)

        modell = criteria.pop("modell", None)
        if modell is not None:
            q = q.filter(Modell.modell.ilike(f"%{_escape_like(modell)}%", escape="\\"))

        preis = criteria.pop("preis", None)
        if preis is not None:
            q = q.filter(Auto.preis <= self._convert("preis", preis, _to_decimal))

        for flag, predicate in TAG_PREDICATES.items():
            if _is_true(criteria.pop(flag, None)):
                q = q.filter(predicate())

        for key, value in criteria.items():
            build_predicate = EQUALITY_PREDICATES.get(key)
            if build_predicate is None:
                logger.debug(f"build: unknown search key '{key}'")
                raise InvalidCriteriaException(key)
            q = q.filter(self._convert(key, value, build_predicate))

        q = q.order_by(Auto.id)

        if pageable is not None and pageable.size == 0:
            return q

        size = pageable.size if pageable is not None and pageable.size is not None else settings.DEFAULT_PAGE_SIZE
        number = pageable.number if pageable is not None and pageable.number is not None else settings.DEFAULT_PAGE_NUMBER
        logger.debug(f"build: limit={size}, offset={number * size}")
        return q.limit(size).offset(number * size)

    @staticmethod
    def _convert(key: str, value: Any, convert: Callable[[Any], Any]):
        try:
            return convert(value)
        except (ValueError, TypeError, InvalidOperation):
            logger.debug(f"build: invalid value for '{key}': {value!r}")
            raise InvalidCriteriaException(key)


query_builder = QueryBuilder()
