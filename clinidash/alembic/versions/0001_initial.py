"""Initial patient record schema."""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _patient_fk():
    return sa.Column(
        "patient_id",
        sa.String(length=36),
        sa.ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade():
    op.create_table(
        "patients",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("dob", sa.Date, nullable=False),
        sa.Column("gender", sa.String(length=16), nullable=False),
        sa.Column("chief_complaint", sa.String(length=2000)),
        sa.Column("clinical_note", sa.Text),  # Fernet token
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )

    op.create_table(
        "lab_results",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("test_name", sa.String(length=120), nullable=False, index=True),
        sa.Column("value", sa.Float, nullable=False),
        sa.Column("unit", sa.String(length=40), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("risk_level", sa.String(length=16), nullable=False),
        sa.Column("interpretation", sa.String(length=2000)),
        sa.Column("reference_range_min", sa.Float),
        sa.Column("reference_range_max", sa.Float),
    )

    op.create_table(
        "treatments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("medication", sa.String(length=255), nullable=False),
        sa.Column("dosage", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date),
    )

    op.create_table(
        "diagnoses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("condition", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
    )

    op.create_table(
        "symptoms",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("severity", sa.Integer, nullable=False),
        sa.Column("date", sa.Date, nullable=False),
    )

    op.create_table(
        "complaints",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("text", sa.String(length=2000), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
    )

    op.create_table(
        "imaging_studies",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("report_summary", sa.Text),  # Fernet token
        sa.Column("patient_complaint", sa.String(length=2000)),
        sa.Column("image_url", sa.String(length=2048)),
    )

    op.create_table(
        "saved_ai_summaries",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _patient_fk(),
        sa.Column("date_generated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("summary_data", sa.Text),  # Fernet token over JSON
    )


def downgrade():
    for table in (
        "saved_ai_summaries",
        "imaging_studies",
        "complaints",
        "symptoms",
        "diagnoses",
        "treatments",
        "lab_results",
        "patients",
    ):
        op.drop_table(table)
