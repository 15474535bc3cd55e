import logging
import re
from datetime import datetime, timezone

from fastapi import BackgroundTasks
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from auto_api.models.auto import Auto
from auto_api.models.auto_file import AutoFile
from auto_api.models.bild import Bild
from auto_api.models.modell import Modell
from auto_api.schemas.auto import AutoCreateRequest, AutoUpdateRequest
from auto_api.services.auto_read_service import AutoReadService, auto_read_service
from auto_api.utils.email import send_new_auto_email
from auto_api.utils.exceptions import (
    NotFoundException, FgnrExistsException, VersionInvalidException,
    VersionOutdatedException, PreconditionRequiredException,
)

logger = logging.getLogger(__name__)

# If-Match value, matched in full: a quoted number with 1-3 digits, e.g. "0" or "42"
VERSION_PATTERN = re.compile(r'"([0-9]{1,3})"')

# Columns an update may change; relations are never touched
MUTABLE_FIELDS = ("fgnr", "art", "preis", "rabatt", "lieferbar", "datum", "schlagwoerter")
NOT_NULLABLE   = frozenset({"fgnr", "preis", "rabatt", "lieferbar"})


class AutoWriteService:

    def __init__(self, read_service: AutoReadService = auto_read_service):
        self._read_service = read_service

    def create(self, db: Session, data: AutoCreateRequest,
               background_tasks: BackgroundTasks | None = None) -> int:
        """Persist a new auto with its Modell and Bilder. Returns the new id."""
        logger.debug(f"create: fgnr={data.fgnr}, modell={data.modell.modell}")
        self._validate_create(db, data.fgnr)

        auto = Auto(
            fgnr=data.fgnr,
            art=data.art,
            preis=data.preis,
            datum=data.datum,
            schlagwoerter=data.schlagwoerter,
            modell=Modell(modell=data.modell.modell),
            bilder=[Bild(beschriftung=b.beschriftung, contentType=b.contentType)
                    for b in data.bilder or []],
        )
        if data.rabatt is not None:    auto.rabatt    = data.rabatt
        if data.lieferbar is not None: auto.lieferbar = data.lieferbar

        db.add(auto)
        try:
            db.commit()
        except IntegrityError as e:
            # a concurrent create won the race for the same fgnr
            db.rollback()
            if self._fgnr_exists(db, data.fgnr):
                raise FgnrExistsException(data.fgnr) from e
            raise
        db.refresh(auto)
        logger.debug(f"create: id={auto.id}, version={auto.version}")

        self._sendmail(auto, background_tasks)
        return auto.id

    def add_file(self, db: Session, auto_id: int, data: bytes, filename: str, mimetype: str) -> AutoFile:
        """Attach a binary file to an auto, replacing any previous one."""
        logger.debug(f"add_file: auto_id={auto_id}, filename={filename}, mimetype={mimetype}")
        auto = self._read_service.find_by_id(db, auto_id)

        try:
            db.execute(delete(AutoFile).where(AutoFile.autoId == auto.id))
            auto_file = AutoFile(autoId=auto.id, filename=filename, mimetype=mimetype, data=data)
            db.add(auto_file)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(auto_file)
        return auto_file

    def update(self, db: Session, auto_id: int | None, data: AutoUpdateRequest, version: str | None) -> int:
        """
        Optimistic update. ``version`` is the If-Match value, e.g. ``'"3"'``.

        Returns the new version number.
        Raises NotFoundException, PreconditionRequiredException,
        VersionInvalidException or VersionOutdatedException.
        """
        logger.debug(f"update: id={auto_id}, version={version}")
        if auto_id is None:
            raise NotFoundException(f"No auto with id {auto_id}")

        auto_db, version_nr = self._validate_update(db, auto_id, version)
        self._merge(auto_db, data)
        try:
            db.commit()
        except StaleDataError as e:
            db.rollback()
            raise VersionOutdatedException(version_nr) from e
        except IntegrityError as e:
            db.rollback()
            if self._fgnr_exists(db, data.fgnr):
                raise FgnrExistsException(data.fgnr) from e
            raise
        db.refresh(auto_db)

        logger.debug(f"update: new version={auto_db.version}")
        return auto_db.version

    def delete(self, db: Session, auto_id: int) -> bool:
        """
        Delete an auto with its Modell, Bilder and file in one transaction.
        True if the auto row itself was deleted.
        """
        logger.debug(f"delete: id={auto_id}")
        auto = self._read_service.find_by_id(db, auto_id, mit_bilder=True)
        modell_id = auto.modell.id if auto.modell else None
        bild_ids = [b.id for b in auto.bilder]

        try:
            if modell_id is not None:
                db.execute(delete(Modell).where(Modell.id == modell_id))
            for bild_id in bild_ids:
                db.execute(delete(Bild).where(Bild.id == bild_id))
            db.execute(delete(AutoFile).where(AutoFile.autoId == auto_id))
            result = db.execute(delete(Auto).where(Auto.id == auto_id))
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.debug(f"delete: rowcount={result.rowcount}")
        return result.rowcount > 0

    # ─── Helpers ──────────────────────────────────────────────────────────────
    @staticmethod
    def _fgnr_exists(db: Session, fgnr: str) -> bool:
        return db.query(Auto.id).filter(Auto.fgnr == fgnr).first() is not None

    def _validate_create(self, db: Session, fgnr: str) -> None:
        logger.debug(f"_validate_create: fgnr={fgnr}")
        if self._fgnr_exists(db, fgnr):
            raise FgnrExistsException(fgnr)

    def _validate_update(self, db: Session, auto_id: int, version: str | None) -> tuple[Auto, int]:
        if version is None:
            raise PreconditionRequiredException()
        match = VERSION_PATTERN.fullmatch(version)
        if match is None:
            raise VersionInvalidException(version)
        version_nr = int(match.group(1))

        auto_db = self._read_service.find_by_id(db, auto_id)
        # newer-than-stored is accepted; only stale versions are rejected
        if version_nr < auto_db.version:
            logger.debug(f"_validate_update: version {version_nr} < {auto_db.version}")
            raise VersionOutdatedException(version_nr)
        return auto_db, version_nr

    @staticmethod
    def _merge(auto: Auto, data: AutoUpdateRequest) -> Auto:
        changes = data.model_dump(include=set(MUTABLE_FIELDS), exclude_unset=True)
        for key, value in changes.items():
            if value is None and key in NOT_NULLABLE:
                continue
            setattr(auto, key, value)
        auto.aktualisiert = datetime.now(timezone.utc)
        return auto

    @staticmethod
    def _sendmail(auto: Auto, background_tasks: BackgroundTasks | None) -> None:
        modell = auto.modell.modell if auto.modell else "N/A"
        if background_tasks is not None:
            background_tasks.add_task(send_new_auto_email, auto.id, modell)
        else:
            send_new_auto_email(auto.id, modell)


auto_write_service = AutoWriteService()
