"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from auto_api.models.auto import Auto, AutoArt
from auto_api.models.modell import Modell
from auto_api.models.bild import Bild
from auto_api.models.auto_file import AutoFile

__all__ = [
    "Auto",
    "AutoArt",
    "Modell",
    "Bild",
    "AutoFile",
]
