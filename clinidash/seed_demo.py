# clinidash/seed_demo.py
"""Load a few demo patients so the dashboard has something to show."""
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

# Allow running from clinidash/ without tweaking PYTHONPATH
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

ENV_PATH = ROOT_DIR / "clinidash" / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)

from clinidash.db.session import SessionLocal
from clinidash.models import init_db
from clinidash.models.patient import Patient
from clinidash.services import records

DEMO_PATIENTS = [
    {
        "patient": {
            "name": "Surin",
            "dob": date(1949, 3, 12),
            "gender": "Male",
            "clinical_note": (
                "History of lumbar fixation L1-L5, presenting with movement-related pain and tingling "
                "in the right lower limb, consistent with right-sided lumbar radiculopathy (L2-L4)."
            ),
        },
        "complaints": [
            {"text": "Movement-related pain in right leg", "date": date(2024, 5, 10)},
            {"text": "Tingling in right lower limb", "date": date(2024, 5, 12)},
        ],
        "symptoms": [
            {"name": "Right Leg Pain", "severity": 8, "date": date(2024, 5, 15)},
            {"name": "Muscle Weakness", "severity": 6, "date": date(2024, 5, 15)},
        ],
        "diagnoses": [{"condition": "Lumbar Radiculopathy", "date": date(2024, 5, 18)}],
        "treatments": [{"medication": "Gabapentin", "dosage": "300mg TID", "start_date": date(2024, 5, 20)}],
        "labs": [{"test_name": "CRP", "value": 12.5, "unit": "mg/L", "date": date(2024, 5, 18)}],
        "imaging": [
            {
                "type": "MRI",
                "date": date(2024, 5, 16),
                "report_summary": (
                    "Stable postoperative lumbar spine (L1-L5 fixation). "
                    "Nerve root compression identified at L2-L4 levels on the right side."
                ),
            }
        ],
    },
    {
        "patient": {
            "name": "John Doe",
            "dob": date(1985, 5, 20),
            "gender": "Male",
            "chief_complaint": "Frequent fatigue and high blood sugar readings after meals.",
        },
        "complaints": [{"text": "Frequent fatigue after meals", "date": date(2024, 7, 20)}],
        "symptoms": [
            {"name": "Fatigue", "severity": 7, "date": date(2024, 8, 1)},
            {"name": "Thirst", "severity": 4, "date": date(2024, 8, 5)},
        ],
        "diagnoses": [
            {"condition": "Hypertension", "date": date(2022, 1, 15)},
            {"condition": "Type 2 Diabetes", "date": date(2021, 11, 10)},
        ],
        "treatments": [
            {"medication": "Lisinopril", "dosage": "10mg daily", "start_date": date(2022, 1, 15)},
            {"medication": "Metformin", "dosage": "500mg twice daily", "start_date": date(2021, 11, 10)},
        ],
        "labs": [
            {"test_name": "Glucose", "value": 140, "unit": "mg/dL", "date": date(2023, 8, 10)},
            {"test_name": "Glucose", "value": 132, "unit": "mg/dL", "date": date(2024, 2, 15)},
            {"test_name": "Glucose", "value": 125, "unit": "mg/dL", "date": date(2024, 7, 20)},
        ],
        "imaging": [
            {
                "type": "X-Ray",
                "date": date(2023, 9, 1),
                "report_summary": "Chest X-ray shows clear lungs, no signs of pneumonia.",
            }
        ],
    },
    {"patient": {"name": "Jane Smith", "dob": date(1992, 11, 30), "gender": "Female"}},
]


def main():
    init_db()
    with SessionLocal() as db:
        for demo in DEMO_PATIENTS:
            name = demo["patient"]["name"]
            exists = db.query(Patient).filter(Patient.name == name).first()
            if exists:
                print(f"Patient already exists: {name} (id={exists.id})")
                continue

            patient = records.create_patient(db, demo["patient"])
            for c in demo.get("complaints", []):
                records.add_complaint(db, patient, c)
            for s in demo.get("symptoms", []):
                records.add_symptom(db, patient, s)
            for d in demo.get("diagnoses", []):
                records.add_diagnosis(db, patient, d)
            for t in demo.get("treatments", []):
                records.add_treatment(db, patient, t)
            for lab in demo.get("labs", []):
                records.add_lab_result(db, patient, lab)
            for i in demo.get("imaging", []):
                records.add_imaging_study(db, patient, i)
            print(f"Seeded patient: {name} (id={patient.id})")


if __name__ == "__main__":
    main()
