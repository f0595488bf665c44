from clinicslots.models.doctor import Doctor, DoctorCreate, DoctorPublic
from clinicslots.models.patient import Patient, PatientCreate, PatientPublic, PatientStatus
from clinicslots.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentType,
    AppointmentUpdate,
)

__all__ = [
    "Doctor",
    "DoctorCreate",
    "DoctorPublic",
    "Patient",
    "PatientCreate",
    "PatientPublic",
    "PatientStatus",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "AppointmentType",
    "AppointmentUpdate",
]
