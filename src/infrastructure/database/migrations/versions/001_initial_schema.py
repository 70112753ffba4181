# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial platform schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-03-03
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(f"{target}.id", ondelete=ondelete),
        nullable=nullable,
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("now()"),
    )


def _scores(*names: str) -> list[sa.Column]:
    return [sa.Column(name, sa.Numeric(5, 2), nullable=True) for name in names]


def upgrade() -> None:
    """Create platform tables."""
    # =========================================================================
    # TENANTS AND ACADEMIC STRUCTURE
    # =========================================================================

    op.create_table(
        "institutions",
        _id_column(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(63), unique=True, nullable=False),
        sa.Column("custom_domain", sa.String(255), unique=True, nullable=True),
        sa.Column("custom_domain_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("grading_format", sa.String(30), nullable=False, server_default="SECUNDARIA_DO"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "levels",
        _id_column(),
        _fk("institution_id", "institutions"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("grading_format", sa.String(30), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_levels_institution_id", "levels", ["institution_id"])

    op.create_table(
        "academic_cycles",
        _id_column(),
        _fk("institution_id", "institutions"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_closed", sa.Boolean, nullable=False, server_default="false"),
        _timestamp("created_at"),
    )
    op.create_index("ix_academic_cycles_institution_id", "academic_cycles", ["institution_id"])

    op.create_table(
        "subjects",
        _id_column(),
        _fk("institution_id", "institutions"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("subject_type", sa.String(20), nullable=False, server_default="GENERAL"),
    )

    op.create_table(
        "classes",
        _id_column(),
        _fk("institution_id", "institutions"),
        _fk("level_id", "levels"),
        _fk("academic_cycle_id", "academic_cycles"),
        _fk("subject_id", "subjects", ondelete="RESTRICT"),
        sa.Column("name", sa.String(100), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_classes_level_cycle", "classes", ["level_id", "academic_cycle_id"])
    op.create_index("ix_classes_institution_id", "classes", ["institution_id"])

    # =========================================================================
    # USERS
    # =========================================================================

    op.create_table(
        "users",
        _id_column(),
        _fk("institution_id", "institutions", nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("user_type", sa.String(20), nullable=False),
        _fk("current_level_id", "levels", ondelete="SET NULL", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_institution_id", "users", ["institution_id"])
    op.create_index("ix_users_user_type", "users", ["user_type"])

    # =========================================================================
    # ENROLLMENT AND GRADE TRACKING
    # =========================================================================

    op.create_table(
        "enrollments",
        _id_column(),
        _fk("student_id", "users"),
        _fk("class_id", "classes"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _timestamp("enrolled_at"),
    )
    # Concurrent bootstraps for the same student can both pass the
    # application-level duplicate check; this index rejects the loser.
    op.create_index(
        "uq_enrollments_active_student_class",
        "enrollments",
        ["student_id", "class_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index("ix_enrollments_class_id", "enrollments", ["class_id"])

    op.create_table(
        "grade_records",
        _id_column(),
        _fk("student_id", "users"),
        _fk("class_id", "classes"),
        _fk("academic_cycle_id", "academic_cycles"),
        *_scores("p1", "p2", "p3", "p4", "rp1", "rp2", "rp3", "rp4", "final_average"),
        sa.Column("status", sa.String(20), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    # One ledger per (student, class, cycle); a withdrawn student is
    # reactivated, never bootstrapped a second time.
    op.create_index(
        "uq_grade_records_student_class_cycle",
        "grade_records",
        ["student_id", "class_id", "academic_cycle_id"],
        unique=True,
    )
    op.create_index(
        "ix_grade_records_student_cycle", "grade_records", ["student_id", "academic_cycle_id"]
    )
    op.create_index("ix_grade_records_class_id", "grade_records", ["class_id"])

    op.create_table(
        "competency_grades",
        _id_column(),
        _fk("student_id", "users"),
        _fk("class_id", "classes"),
        _fk("academic_cycle_id", "academic_cycles"),
        sa.Column("competency", sa.String(10), nullable=False),
        *_scores("p1", "p2", "p3", "p4"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "uq_competency_grades_student_class_cycle_code",
        "competency_grades",
        ["student_id", "class_id", "academic_cycle_id", "competency"],
        unique=True,
    )
    op.create_index(
        "ix_competency_grades_student_cycle",
        "competency_grades",
        ["student_id", "academic_cycle_id"],
    )

    op.create_table(
        "technical_grades",
        _id_column(),
        _fk("student_id", "users"),
        _fk("class_id", "classes"),
        sa.Column("ra_code", sa.String(10), nullable=False),
        *_scores("value"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "uq_technical_grades_student_class_code",
        "technical_grades",
        ["student_id", "class_id", "ra_code"],
        unique=True,
    )


def downgrade() -> None:
    """Drop platform tables."""
    op.drop_table("technical_grades")
    op.drop_table("competency_grades")
    op.drop_table("grade_records")
    op.drop_table("enrollments")
    op.drop_table("users")
    op.drop_table("classes")
    op.drop_table("subjects")
    op.drop_table("academic_cycles")
    op.drop_table("levels")
    op.drop_table("institutions")
