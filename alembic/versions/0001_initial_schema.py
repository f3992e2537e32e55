"""patrons, sign_ins and drawings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "patrons",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("contact", sa.String(length=255), nullable=True),
        sa.Column("assigned_number", ID_TYPE, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_patrons")),
    )
    op.create_index(
        op.f("ix_patrons_assigned_number"),
        "patrons",
        ["assigned_number"],
        unique=True,
    )

    op.create_table(
        "sign_ins",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("patron_id", ID_TYPE, nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["patron_id"],
            ["patrons.id"],
            name=op.f("fk_sign_ins_patron_id_patrons"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sign_ins")),
    )
    op.create_index(
        "ix_sign_ins_week_number_patron_id",
        "sign_ins",
        ["week_number", "patron_id"],
        unique=False,
    )

    op.create_table(
        "drawings",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("drawn_number", sa.Integer(), nullable=False),
        sa.Column("winner_id", ID_TYPE, nullable=True),
        sa.Column("prize_amount", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["winner_id"],
            ["patrons.id"],
            name=op.f("fk_drawings_winner_id_patrons"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_drawings")),
    )
    op.create_index(
        op.f("ix_drawings_week_number"), "drawings", ["week_number"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_drawings_week_number"), table_name="drawings")
    op.drop_table("drawings")
    op.drop_index("ix_sign_ins_week_number_patron_id", table_name="sign_ins")
    op.drop_table("sign_ins")
    op.drop_index(op.f("ix_patrons_assigned_number"), table_name="patrons")
    op.drop_table("patrons")
