from uuid import uuid4

from sqlmodel import Field, SQLModel


class DoctorBase(SQLModel):
    name: str
    specialty: str
    color: str = "#4299E1"  # calendar colour


class Doctor(DoctorBase, table=True):
    __tablename__ = "doctors"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    tenant_id: str = Field(index=True)


class DoctorCreate(DoctorBase):
    pass


class DoctorPublic(DoctorBase):
    id: str
