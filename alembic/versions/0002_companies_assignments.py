"""empresas, asignaciones de encuestas y comentarios"""
from alembic import op
import sqlalchemy as sa

revision = "0002_companies_assignments"
down_revision = "0001_init_schema"
branch_labels = None
depends_on = None


def _company_fk(table, ondelete):
    op.add_column(
        table,
        sa.Column("company_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("companies.id", ondelete=ondelete), nullable=True),
    )
    op.create_index(f"ix_{table}_company_id", table, ["company_id"])


def upgrade():
    op.create_table(
        "companies",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("domain", sa.String(255), nullable=True, unique=True),
        sa.Column("subscription_plan", sa.String(20), nullable=False, server_default="basic"),
        sa.Column("max_users", sa.Integer, nullable=False, server_default="50"),
        sa.Column("max_surveys", sa.Integer, nullable=False, server_default="10"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "subscription_plan IN ('basic','professional','premium','enterprise')",
            name="ck_companies_plan",
        ),
    )

    _company_fk("users", "SET NULL")
    _company_fk("surveys", "CASCADE")
    _company_fk("departments", "CASCADE")
    op.add_column(
        "users",
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # el nombre de departamento pasa a ser único por empresa
    op.drop_constraint("departments_name_key", "departments", type_="unique")
    op.create_unique_constraint("uq_department_company_name", "departments", ["company_id", "name"])

    op.create_table(
        "survey_assignments",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("survey_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("user_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("assigned_by", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("due_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("refill_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("assigned_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending','in_progress','completed','refill_requested')",
            name="ck_survey_assignments_status",
        ),
    )
    op.add_column(
        "survey_responses",
        sa.Column("assignment_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("survey_assignments.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_survey_responses_assignment_id", "survey_responses", ["assignment_id"])

    op.create_table(
        "survey_comments",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("survey_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("assignment_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("survey_assignments.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("user_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("recipient_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("parent_comment_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("survey_comments.id", ondelete="CASCADE"), nullable=True),
        sa.Column("comment_text", sa.Text, nullable=False),
        sa.Column("comment_type", sa.String(20), nullable=False, server_default="general"),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("survey_comments")
    op.drop_index("ix_survey_responses_assignment_id", table_name="survey_responses")
    op.drop_column("survey_responses", "assignment_id")
    op.drop_table("survey_assignments")

    op.drop_constraint("uq_department_company_name", "departments", type_="unique")
    op.create_unique_constraint("departments_name_key", "departments", ["name"])

    op.drop_column("users", "updated_at")
    for table in ("departments", "surveys", "users"):
        op.drop_index(f"ix_{table}_company_id", table_name=table)
        op.drop_column(table, "company_id")
    op.drop_table("companies")
