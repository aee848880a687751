# alembic/versions/0001_init_schema.py
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init_schema"
down_revision = None
branch_labels = None
depends_on = None

JSONB = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id():
    return sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True)


def _fk(name, target, ondelete="CASCADE", nullable=False):
    return sa.Column(name, sa.Uuid(as_uuid=True), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable, index=True)


def _created_at(name="created_at"):
    return sa.Column(name, sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now())


def _sparse_value_columns():
    # una sola columna con valor según response_type
    return [
        sa.Column("response_type", sa.String(10), nullable=False),
        sa.Column("text_response", sa.Text, nullable=True),
        sa.Column("number_response", sa.Float, nullable=True),
        sa.Column("array_response", JSONB, nullable=True),
        sa.Column("object_response", JSONB, nullable=True),
    ]


def upgrade():
    # --- usuarios ---
    op.create_table(
        "departments",
        _id(),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="employee"),
        sa.Column("department_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("departments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
    )

    # --- estructura de encuestas ---
    op.create_table(
        "surveys",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("allows_refill", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_table(
        "survey_sections",
        _id(),
        _fk("survey_id", "surveys.id"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_table(
        "questions",
        _id(),
        _fk("section_id", "survey_sections.id"),
        sa.Column("question_text", sa.Text, nullable=False),
        sa.Column("question_type", sa.String(20), nullable=False),
        sa.Column("is_required", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("has_other_option", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint(
            "question_type IN ('text','select','radio','checkbox','rating','yes_no')",
            name="ck_questions_type",
        ),
    )
    op.create_table(
        "question_options",
        _id(),
        _fk("question_id", "questions.id"),
        sa.Column("option_text", sa.String(500), nullable=False),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
    )

    # --- respuestas ---
    op.create_table(
        "survey_responses",
        _id(),
        _fk("survey_id", "surveys.id"),
        _fk("user_id", "users.id", ondelete="SET NULL", nullable=True),
        sa.Column("employee_name", sa.String(200), nullable=True),
        sa.Column("employee_designation", sa.String(200), nullable=True),
        sa.Column("employee_department", sa.String(200), nullable=True, index=True),
        sa.Column("employee_supervisor", sa.String(200), nullable=True),
        sa.Column("employee_reports_to", sa.String(200), nullable=True),
        sa.Column("response_attempt", sa.Integer, nullable=False, server_default="1"),
        sa.Column("is_refill", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("completion_time_minutes", sa.Float, nullable=True),
        _created_at("submitted_at"),
    )
    op.create_table(
        "question_responses",
        _id(),
        _fk("survey_response_id", "survey_responses.id"),
        _fk("question_id", "questions.id"),
        *_sparse_value_columns(),
        _created_at(),
    )

    # --- auditoría interna ---
    op.create_table(
        "audit_questions",
        _id(),
        _fk("survey_id", "surveys.id"),
        sa.Column("section_id", sa.Uuid(as_uuid=True),
                  sa.ForeignKey("survey_sections.id", ondelete="SET NULL"), nullable=True),
        sa.Column("question_text", sa.Text, nullable=False),
        sa.Column("question_type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_required", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("has_other_option", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(200), nullable=True),
        _created_at(),
    )
    op.create_table(
        "audit_question_options",
        _id(),
        _fk("audit_question_id", "audit_questions.id"),
        sa.Column("option_text", sa.String(500), nullable=False),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_table(
        "audit_responses",
        _id(),
        _fk("survey_id", "surveys.id"),
        _fk("audit_question_id", "audit_questions.id"),
        *_sparse_value_columns(),
        sa.Column("responded_by", sa.String(200), nullable=False, server_default="admin"),
        _created_at("updated_at"),
        sa.UniqueConstraint("survey_id", "audit_question_id", name="uq_audit_response_question"),
    )

    # --- bitácora de acciones de administración ---
    op.create_table(
        "audit_logs",
        _id(),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=True, index=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("payload", JSONB, nullable=True),
        sa.Column("ip", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        _created_at(),
    )


def downgrade():
    for table in (
        "audit_logs",
        "audit_responses",
        "audit_question_options",
        "audit_questions",
        "question_responses",
        "survey_responses",
        "question_options",
        "questions",
        "survey_sections",
        "surveys",
        "users",
        "departments",
    ):
        op.drop_table(table)
