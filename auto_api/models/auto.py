import enum
from sqlalchemy import Column, Integer, String, Numeric, Boolean, Date, TIMESTAMP, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from auto_api.database import Base
from auto_api.models.types import SimpleArray


class AutoArt(str, enum.Enum):
    COUPE = "COUPE"
    LIMO  = "LIMO"
    KOMBI = "KOMBI"


def _next_version(current: int | None) -> int:
    # A fresh row starts at 0; every UPDATE bumps by one
    return 0 if current is None else current + 1


class Auto(Base):
    __tablename__ = "auto"

    id            = Column(Integer, primary_key=True, index=True)
    version       = Column(Integer, nullable=False)
    fgnr          = Column(String(16), unique=True, nullable=False, index=True)
    art           = Column(Enum(AutoArt, native_enum=False, length=8), nullable=True)
    preis         = Column(Numeric(8, 2, asdecimal=True), nullable=False)
    rabatt        = Column(Numeric(4, 3, asdecimal=True), nullable=False, default=0)
    lieferbar     = Column(Boolean, nullable=False, default=False)
    datum         = Column(Date, nullable=True)
    schlagwoerter = Column(SimpleArray(512), nullable=True)
    erzeugt       = Column(TIMESTAMP(timezone=True), server_default=func.now())
    aktualisiert  = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # ─── Relationships ─────────────────────────────────────────────────────────
    modell = relationship("Modell", back_populates="auto", uselist=False, cascade="all, delete-orphan")
    bilder = relationship("Bild", back_populates="auto", order_by="Bild.id", cascade="all, delete-orphan")
    file   = relationship("AutoFile", back_populates="auto", uselist=False, cascade="all, delete-orphan")

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": _next_version,
    }

    def __repr__(self):
        return f"<Auto id={self.id} version={self.version} fgnr={self.fgnr}>"
