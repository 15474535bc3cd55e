import re
from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from auto_api.models.auto import AutoArt

FGNR_PATTERN   = re.compile(r"^\d-\d{4}-\d$")
MODELL_PATTERN = re.compile(r"^\w.*")


# ─── Nested ───────────────────────────────────────────────────────────────────
class ModellRequest(BaseModel):
    modell: str = Field(max_length=40)

    @field_validator("modell")
    @classmethod
    def check_modell(cls, v):
        if not MODELL_PATTERN.match(v): raise ValueError("Modell must start with a letter or digit")
        return v


class BildRequest(BaseModel):
    beschriftung: str = Field(max_length=32)
    contentType:  str = Field(max_length=16)


# ─── Requests ─────────────────────────────────────────────────────────────────
class AutoUpdateRequest(BaseModel):
    """Scalar fields only. Modell and Bilder are not touched by an update."""
    fgnr:          str
    art:           Optional[AutoArt] = None
    preis:         Decimal
    rabatt:        Optional[Decimal] = None
    lieferbar:     Optional[bool] = None
    datum:         Optional[date] = None
    schlagwoerter: Optional[list[str]] = None

    @field_validator("fgnr")
    @classmethod
    def check_fgnr(cls, v):
        if not FGNR_PATTERN.match(v): raise ValueError("fgnr must look like 1-2345-6")
        return v

    @field_validator("preis")
    @classmethod
    def check_preis(cls, v):
        if v < 0: raise ValueError("preis must not be negative")
        return v

    @field_validator("rabatt")
    @classmethod
    def check_rabatt(cls, v):
        if v is not None and not (0 <= v <= 1): raise ValueError("rabatt must be between 0 and 1")
        return v

    @field_validator("schlagwoerter")
    @classmethod
    def check_schlagwoerter(cls, v):
        if v is None:
            return v
        # stored comma-joined, see models/types.py
        if any(not tag or "," in tag for tag in v): raise ValueError("schlagwoerter must be non-empty and contain no comma")
        if len(set(v)) != len(v): raise ValueError("schlagwoerter must be unique")
        return v


class AutoCreateRequest(AutoUpdateRequest):
    modell: ModellRequest
    bilder: Optional[list[BildRequest]] = None


# ─── Responses ────────────────────────────────────────────────────────────────
class CreatePayload(BaseModel):
    id: int
