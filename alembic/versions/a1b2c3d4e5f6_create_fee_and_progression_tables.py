"""create students, fees and progression tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.execute("CREATE TYPE fee_status AS ENUM ('paid', 'partial', 'unpaid')")
    op.execute("CREATE TYPE progress_status AS ENUM ('needs_work', 'ready', 'passed', 'deferred')")

    op.create_table(
        "students",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("program", sa.String(100), nullable=True),
        sa.Column("default_monthly_fee", sa.Numeric(10, 2), nullable=False, server_default="2000"),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_students_id"), "students", ["id"], unique=False)
    op.create_index(op.f("ix_students_program"), "students", ["program"], unique=False)

    op.create_table(
        "fees",
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("monthly_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("balance_due", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", postgresql.ENUM("paid", "partial", "unpaid",
                  name="fee_status", create_type=False), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "year", "month", name="uq_fees_student_period"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_fees_month"),
        sa.CheckConstraint("paid_amount <= monthly_fee", name="ck_fees_paid_le_fee"),
    )
    op.create_index(op.f("ix_fees_id"), "fees", ["id"], unique=False)
    op.create_index(op.f("ix_fees_student_id"), "fees", ["student_id"], unique=False)
    op.create_index(op.f("ix_fees_status"), "fees", ["status"], unique=False)

    op.create_table(
        "belt_levels",
        sa.Column("discipline", sa.String(100), nullable=True),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(50), nullable=False),
        sa.Column("level_name", sa.String(100), nullable=True),
        sa.Column("next_level_id", sa.UUID(), nullable=True),
        sa.Column("requirements", postgresql.JSONB(), nullable=True),
        sa.Column("min_age", sa.Integer(), nullable=True),
        sa.Column("min_sessions", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["next_level_id"], ["belt_levels.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_belt_levels_id"), "belt_levels", ["id"], unique=False)
    op.create_index(op.f("ix_belt_levels_discipline"), "belt_levels", ["discipline"], unique=False)

    op.create_table(
        "discipline_levels",
        sa.Column("discipline", sa.String(100), nullable=False),
        sa.Column("level_name", sa.String(100), nullable=False),
        sa.Column("level_order", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("requirements", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_discipline_levels_id"), "discipline_levels", ["id"], unique=False)
    op.create_index(op.f("ix_discipline_levels_discipline"), "discipline_levels", ["discipline"], unique=False)

    op.create_table(
        "student_progress",
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("belt_level_id", sa.UUID(), nullable=False),
        sa.Column("status", postgresql.ENUM("needs_work", "ready", "passed", "deferred",
                  name="progress_status", create_type=False), nullable=False),
        sa.Column("stripe_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("coach_notes", sa.Text(), nullable=True),
        sa.Column("assessment_date", sa.Date(), nullable=True),
        sa.Column("assessed_by", sa.UUID(), nullable=True),
        sa.Column("evidence_media_urls", postgresql.JSONB(), nullable=False, server_default="[]"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["belt_level_id"], ["belt_levels.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("stripe_count >= 0", name="ck_student_progress_stripes"),
    )
    op.create_index(op.f("ix_student_progress_id"), "student_progress", ["id"], unique=False)
    op.create_index(op.f("ix_student_progress_student_id"), "student_progress", ["student_id"], unique=False)
    op.create_index(op.f("ix_student_progress_belt_level_id"), "student_progress", ["belt_level_id"], unique=False)
    op.create_index(op.f("ix_student_progress_status"), "student_progress", ["status"], unique=False)

    op.create_table(
        "promotion_history",
        sa.Column("student_id", sa.UUID(), nullable=False),
        sa.Column("from_belt_id", sa.UUID(), nullable=True),
        sa.Column("to_belt_id", sa.UUID(), nullable=False),
        sa.Column("promoted_by", sa.UUID(), nullable=True),
        sa.Column("promoted_at", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["from_belt_id"], ["belt_levels.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["to_belt_id"], ["belt_levels.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_promotion_history_id"), "promotion_history", ["id"], unique=False)
    op.create_index(op.f("ix_promotion_history_student_id"), "promotion_history", ["student_id"], unique=False)
    op.create_index(op.f("ix_promotion_history_promoted_at"), "promotion_history", ["promoted_at"], unique=False)


def downgrade() -> None:
    op.drop_table("promotion_history")
    op.drop_table("student_progress")
    op.drop_table("discipline_levels")
    op.drop_table("belt_levels")
    op.drop_table("fees")
    op.drop_table("students")
    op.execute("DROP TYPE IF EXISTS progress_status")
    op.execute("DROP TYPE IF EXISTS fee_status")
