import unittest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auto_api.config import settings
from auto_api.database import Base
from auto_api.models import Auto, AutoArt, Modell, Bild

# SQLite in-memory database shared by every session of a test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    bind=engine, autocommit=False, autoflush=False, expire_on_commit=False,
)


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema and session per test."""

    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)


def make_auto(
    db,
    fgnr: str,
    modell: str,
    preis: str = "10000.00",
    schlagwoerter: list[str] | None = None,
    art: AutoArt | None = AutoArt.COUPE,
    lieferbar: bool = True,
    bilder: int = 0,
) -> Auto:
    auto = Auto(
        fgnr=fgnr,
        art=art,
        preis=Decimal(preis),
        rabatt=Decimal("0.100"),
        lieferbar=lieferbar,
        datum=date(2024, 1, 31),
        schlagwoerter=schlagwoerter,
        modell=Modell(modell=modell),
        bilder=[Bild(beschriftung=f"Bild {i}", contentType="image/png") for i in range(bilder)],
    )
    db.add(auto)
    db.commit()
    db.refresh(auto)
    return auto


def seed_autos(db) -> dict[str, Auto]:
    """Five autos covering every search filter, keyed by model name."""
    autos = [
        make_auto(db, "1-0001-1", "BMW", "30000.00", ["SPORT"], AutoArt.COUPE),
        make_auto(db, "1-0002-2", "Mercedes", "50000.00", ["GELAENDE", "KOMFORT"], AutoArt.KOMBI),
        make_auto(db, "1-0003-3", "Audi", "40000.00", ["KOMFORT"], AutoArt.LIMO),
        make_auto(db, "1-0004-4", "Tesla", "45000.50", ["PYTHON"], AutoArt.LIMO, lieferbar=False),
        make_auto(db, "1-0005-5", "Trabant", "1000.00", None, None),
    ]
    return {a.modell.modell: a for a in autos}


def make_token(*roles: str, sub: str = "user-1", expires_in: int = 300) -> str:
    payload = {
        "sub": sub,
        "preferred_username": sub,
        "realm_access": {"roles": list(roles)},
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, settings.AUTH_SECRET_KEY, algorithm=settings.AUTH_ALGORITHM)


def auth_header(*roles: str) -> dict:
    return {"Authorization": f"Bearer {make_token(*roles)}"}
