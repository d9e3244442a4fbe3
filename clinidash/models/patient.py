# clinidash/models/patient.py
import uuid
import datetime
from typing import List, Optional

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, text
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinidash.db.session import Base
from clinidash.services.lab_reference import RiskLevel
from clinidash.utils.encryption import EncryptedJSON, EncryptedText


def _uuid() -> str:
    return str(uuid.uuid4())


def _patient_fk() -> Mapped[str]:
    return mapped_column(
        String(36), ForeignKey("patients.id", ondelete="CASCADE"), index=True, nullable=False
    )


class Patient(Base):
    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dob: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)  # "Male"|"Female"|"Other"
    chief_complaint: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    # Provider-authored summary, often seeded from a saved AI narrative
    clinical_note: Mapped[Optional[str]] = mapped_column(EncryptedText, nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    lab_results: Mapped[List["LabResult"]] = relationship(
        "LabResult", back_populates="patient", cascade="all, delete-orphan", order_by="LabResult.date"
    )
    treatments: Mapped[List["Treatment"]] = relationship(
        "Treatment", back_populates="patient", cascade="all, delete-orphan", order_by="Treatment.start_date"
    )
    diagnoses: Mapped[List["Diagnosis"]] = relationship(
        "Diagnosis", back_populates="patient", cascade="all, delete-orphan", order_by="Diagnosis.date"
    )
    symptoms: Mapped[List["Symptom"]] = relationship(
        "Symptom", back_populates="patient", cascade="all, delete-orphan", order_by="Symptom.date"
    )
    complaints: Mapped[List["Complaint"]] = relationship(
        "Complaint", back_populates="patient", cascade="all, delete-orphan", order_by="Complaint.date"
    )
    imaging_studies: Mapped[List["ImagingStudy"]] = relationship(
        "ImagingStudy", back_populates="patient", cascade="all, delete-orphan", order_by="ImagingStudy.date"
    )
    saved_ai_summaries: Mapped[List["SavedAISummary"]] = relationship(
        "SavedAISummary",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="SavedAISummary.date_generated",
    )


class LabResult(Base):
    __tablename__ = "lab_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    test_name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(40), nullable=False, default="")
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    # Always written by the record store from calculate_risk_level
    risk_level: Mapped[str] = mapped_column(String(16), nullable=False, default=RiskLevel.Normal.value)
    interpretation: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    reference_range_min: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    reference_range_max: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="lab_results")


class Treatment(Base):
    __tablename__ = "treatments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    medication: Mapped[str] = mapped_column(String(255), nullable=False)
    dosage: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="treatments")


class Diagnosis(Base):
    __tablename__ = "diagnoses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    condition: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="diagnoses")


class Symptom(Base):
    __tablename__ = "symptoms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    severity: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-10
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="symptoms")


class Complaint(Base):
    __tablename__ = "complaints"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    text: Mapped[str] = mapped_column(String(2000), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="complaints")


class ImagingStudy(Base):
    __tablename__ = "imaging_studies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    type: Mapped[str] = mapped_column(String(32), nullable=False)  # MRI|Ultrasound|X-Ray|CT Scan|Other
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    report_summary: Mapped[Optional[str]] = mapped_column(EncryptedText, nullable=True)
    patient_complaint: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="imaging_studies")


class SavedAISummary(Base):
    __tablename__ = "saved_ai_summaries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    patient_id: Mapped[str] = _patient_fk()
    date_generated: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.datetime.now(datetime.timezone.utc))
    summary_data: Mapped[Optional[dict]] = mapped_column(EncryptedJSON, nullable=True)

    patient: Mapped["Patient"] = relationship("Patient", back_populates="saved_ai_summaries")
