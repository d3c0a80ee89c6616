from __future__ import annotations

from pydantic import BaseModel, Field


class ExifOutput(BaseModel):
    path: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    date_time: str | None = Field(default=None, serialization_alias="dateTime")


class LocationOutput(BaseModel):
    latitude: float
    longitude: float
    accuracy: float = 0.0


class AnalysisOutput(BaseModel):
    license_plate: str
    vehicle_description: str
    violation_type: str | None = None


class JurisdictionOutput(BaseModel):
    state: str = ""
    city: str = ""
    email: str


class CitationOutput(BaseModel):
    jurisdiction: str
    code: str
    description: str
    fine: str | None = None


class EmailOutput(BaseModel):
    to: str
    subject: str
    body: str
    gmail_url: str


class ReportOutput(BaseModel):
    id: str
    timestamp: str
    timestamp_source: str
    location: LocationOutput | None = None
    location_source: str | None = None
    analysis: AnalysisOutput
    user_reported_violation: str
    recipient_email: str
    jurisdiction: JurisdictionOutput
    official_citation: CitationOutput | None = None
    image: str | None = None
    email: EmailOutput | None = None
