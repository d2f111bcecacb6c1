"""Initial schema — classes, students, academic years and development assessments.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE = sa.text("is_deleted = false")

age_group = postgresql.ENUM("TODDLER", "GROUP_A", "GROUP_B", name="age_group", create_type=False)
gender = postgresql.ENUM("MALE", "FEMALE", name="gender", create_type=False)
religion = postgresql.ENUM(
    "ISLAM", "KATOLIK", "PROTESTAN", "HINDU", "BUDHA", "KONGHUCU", "LAINNYA",
    name="religion",
    create_type=False,
)
semester = postgresql.ENUM("SEMESTER_1", "SEMESTER_2", name="semester", create_type=False)
development_level = postgresql.ENUM(
    "BAIK", "CUKUP", "PERLU_DILATIH", name="development_level", create_type=False
)

_ENUMS = (age_group, gender, religion, semester, development_level)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("deleted_at", sa.TIMESTAMP(), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in _ENUMS:
        enum_type.create(bind, checkfirst=True)

    # -- classes --
    op.create_table(
        "classes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("age_group", age_group, nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )

    # -- academic_years --
    op.create_table(
        "academic_years",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("year", sa.String(9), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_academic_years_year_active",
        "academic_years",
        ["year"],
        unique=True,
        postgresql_where=ACTIVE,
    )

    # -- students --
    op.create_table(
        "students",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("nis", sa.String(50), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("gender", gender, nullable=False),
        sa.Column("religion", religion, nullable=False),
        sa.Column("birth_place", sa.String(100), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("academic_year", sa.String(9), nullable=False),
        sa.Column("admitted_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("class_id", sa.String(36), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_students_nis_active", "students", ["nis"], unique=True, postgresql_where=ACTIVE
    )

    # -- development_aspects --
    op.create_table(
        "development_aspects",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_development_aspects_code_active",
        "development_aspects",
        ["code"],
        unique=True,
        postgresql_where=ACTIVE,
    )

    # -- development_indicators --
    op.create_table(
        "development_indicators",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("aspect_id", sa.String(36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("short_name", sa.String(100), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("age_group", age_group, nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ["aspect_id"], ["development_aspects.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # -- development_assessments --
    op.create_table(
        "development_assessments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column("indicator_id", sa.String(36), nullable=False),
        sa.Column("semester", semester, nullable=False),
        sa.Column("academic_year_id", sa.String(36), nullable=False),
        sa.Column("development", development_level, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assessment_date", sa.Date(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["indicator_id"], ["development_indicators.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["academic_year_id"], ["academic_years.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # One active rating per student, indicator, semester and academic year.
    op.create_index(
        "uq_development_assessments_natural_key_active",
        "development_assessments",
        ["student_id", "indicator_id", "semester", "academic_year_id"],
        unique=True,
        postgresql_where=ACTIVE,
    )
    op.create_index(
        "idx_development_assessments_student_id", "development_assessments", ["student_id"]
    )


def downgrade() -> None:
    op.drop_table("development_assessments")
    op.drop_table("development_indicators")
    op.drop_table("development_aspects")
    op.drop_table("students")
    op.drop_table("academic_years")
    op.drop_table("classes")

    bind = op.get_bind()
    for enum_type in reversed(_ENUMS):
        enum_type.drop(bind, checkfirst=True)
