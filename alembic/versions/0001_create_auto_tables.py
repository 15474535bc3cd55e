"""create auto, modell, bild and auto_file tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "auto",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("fgnr", sa.String(16), nullable=False),
        sa.Column("art", sa.Enum("COUPE", "LIMO", "KOMBI", name="autoart", native_enum=False, length=8),
                  nullable=True),
        sa.Column("preis", sa.Numeric(8, 2), nullable=False),
        sa.Column("rabatt", sa.Numeric(4, 3), nullable=False),
        sa.Column("lieferbar", sa.Boolean(), nullable=False),
        sa.Column("datum", sa.Date(), nullable=True),
        sa.Column("schlagwoerter", sa.String(512), nullable=True),
        sa.Column("erzeugt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column("aktualisiert", sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_auto_id", "auto", ["id"])
    op.create_index("ix_auto_fgnr", "auto", ["fgnr"], unique=True)

    op.create_table(
        "modell",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("modell", sa.String(40), nullable=False),
        sa.Column("auto_id", sa.Integer(), sa.ForeignKey("auto.id", ondelete="CASCADE"),
                  nullable=False, unique=True),
    )
    op.create_index("ix_modell_id", "modell", ["id"])

    op.create_table(
        "bild",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("beschriftung", sa.String(32), nullable=False),
        sa.Column("content_type", sa.String(16), nullable=False),
        sa.Column("auto_id", sa.Integer(), sa.ForeignKey("auto.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_bild_id", "bild", ["id"])
    op.create_index("ix_bild_auto_id", "bild", ["auto_id"])

    op.create_table(
        "auto_file",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("mimetype", sa.String(100), nullable=False),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.Column("auto_id", sa.Integer(), sa.ForeignKey("auto.id", ondelete="CASCADE"),
                  nullable=False, unique=True),
    )
    op.create_index("ix_auto_file_id", "auto_file", ["id"])


def downgrade() -> None:
    op.drop_table("auto_file")
    op.drop_table("bild")
    op.drop_table("modell")
    op.drop_table("auto")
