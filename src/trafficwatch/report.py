from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from urllib.parse import quote, urlencode

from trafficwatch.citations import Citation, lookup_citation
from trafficwatch.config import DEFAULT_RECIPIENT
from trafficwatch.ids import new_report_id
from trafficwatch.jurisdiction import Jurisdiction, ReverseGeocoder, resolve_jurisdiction
from trafficwatch.media.exif import ExifResult, GeoCoordinate, extract_exif
from trafficwatch.output_models import (
    AnalysisOutput,
    CitationOutput,
    EmailOutput,
    JurisdictionOutput,
    LocationOutput,
    ReportOutput,
)
from trafficwatch.util.time import now_local_iso

log = logging.getLogger(__name__)

UNKNOWN_PLATE = "UNKNOWN"
NONE_OBSERVED = "None observed"
OTHER = "Other"


@dataclass(slots=True)
class VehicleAnalysis:
    """What the image-understanding service reports about the photo."""

    license_plate: str = UNKNOWN_PLATE
    vehicle_description: str = ""
    violation_type: str | None = None


@dataclass(slots=True)
class ViolationReport:
    id: str
    timestamp: str
    timestamp_source: str
    location: GeoCoordinate | None
    location_source: str | None
    analysis: VehicleAnalysis
    violation: str
    jurisdiction: Jurisdiction = field(default_factory=Jurisdiction)
    citation: Citation | None = None
    image_name: str | None = None

    @property
    def recipient_email(self) -> str:
        return self.jurisdiction.email


@dataclass(frozen=True, slots=True)
class EmailDraft:
    to: str
    subject: str
    body: str

    def gmail_url(self) -> str:
        query = urlencode(
            {"view": "cm", "fs": "1", "to": self.to, "su": self.subject, "body": self.body},
            quote_via=quote,
        )
        return f"https://mail.google.com/mail/?{query}"

    def mailto_url(self) -> str:
        query = urlencode({"subject": self.subject, "body": self.body}, quote_via=quote)
        return f"mailto:{self.to}?{query}"


def choose_violation(selected: str, custom: str, analysis: VehicleAnalysis) -> str:
    """Pick the violation text from the form choice, falling back to the detected one."""
    detected = analysis.violation_type
    if not selected:
        if not detected or detected == NONE_OBSERVED:
            return ""
        return detected
    if selected == OTHER:
        return custom.strip() or "Other (Unspecified)"
    return selected


def build_report(
    image_bytes: bytes,
    analysis: VehicleAnalysis,
    selected_violation: str = "",
    custom_violation: str = "",
    geocoder: ReverseGeocoder | None = None,
    default_email: str = DEFAULT_RECIPIENT,
    image_name: str | None = None,
    exif: ExifResult | None = None,
    now: str | None = None,
) -> ViolationReport:
    exif = exif if exif is not None else extract_exif(image_bytes)

    location = exif.location
    location_source = "image" if location is not None else None
    if exif.date_time is not None:
        timestamp, timestamp_source = exif.date_time, "image"
    else:
        timestamp, timestamp_source = now or now_local_iso(), "now"

    jurisdiction = Jurisdiction(email=default_email)
    if location is not None and geocoder is not None:
        jurisdiction = resolve_jurisdiction(location.latitude, location.longitude, geocoder, default_email)
    elif location is None:
        log.info("no location in image metadata; using default recipient %s", default_email)

    violation = choose_violation(selected_violation, custom_violation, analysis)
    citation = lookup_citation(jurisdiction.state, jurisdiction.city, violation)

    return ViolationReport(
        id=new_report_id(),
        timestamp=timestamp,
        timestamp_source=timestamp_source,
        location=location,
        location_source=location_source,
        analysis=analysis,
        violation=violation,
        jurisdiction=jurisdiction,
        citation=citation,
        image_name=image_name,
    )


def update_violation(report: ViolationReport, violation: str) -> ViolationReport:
    citation = lookup_citation(report.jurisdiction.state, report.jurisdiction.city, violation)
    return replace(report, violation=violation, citation=citation)


def update_plate(report: ViolationReport, plate: str) -> ViolationReport:
    return replace(report, analysis=replace(report.analysis, license_plate=plate.strip().upper()))


def maps_url(location: GeoCoordinate | None) -> str:
    if location is None:
        return "Location not available"
    return f"https://www.google.com/maps/search/?api=1&query={location.latitude},{location.longitude}"


def compose_email(report: ViolationReport, signature: str = "Concerned Citizen") -> EmailDraft:
    subject = f"Traffic Violation Report: {report.analysis.license_plate} - {report.violation}"
    lines = [
        "To Whom It May Concern,",
        "",
        "I would like to report a traffic violation.",
        "",
        f"Violation: {report.violation}",
    ]
    if report.citation is not None:
        lines.append(f"Citation: {report.citation.code} ({report.citation.description})")
    lines += [
        f"License Plate: {report.analysis.license_plate}",
        f"Vehicle Description: {report.analysis.vehicle_description}",
        f"Location: {maps_url(report.location)}",
        f"Timestamp: {report.timestamp.replace('T', ' ')}",
        "",
        "Please find the photo evidence attached to this email.",
        "",
        "Sincerely,",
        signature,
    ]
    return EmailDraft(to=report.recipient_email, subject=subject, body="\n".join(lines))


def citation_to_output(citation: Citation | None) -> CitationOutput | None:
    if citation is None:
        return None
    return CitationOutput(
        jurisdiction=citation.jurisdiction,
        code=citation.code,
        description=citation.description,
        fine=citation.fine,
    )


def report_to_output(report: ViolationReport, email: EmailDraft | None = None) -> ReportOutput:
    location = None
    if report.location is not None:
        location = LocationOutput(latitude=report.location.latitude, longitude=report.location.longitude)
    email_out = None
    if email is not None:
        email_out = EmailOutput(to=email.to, subject=email.subject, body=email.body, gmail_url=email.gmail_url())
    return ReportOutput(
        id=report.id,
        timestamp=report.timestamp,
        timestamp_source=report.timestamp_source,
        location=location,
        location_source=report.location_source,
        analysis=AnalysisOutput(
            license_plate=report.analysis.license_plate,
            vehicle_description=report.analysis.vehicle_description,
            violation_type=report.analysis.violation_type,
        ),
        user_reported_violation=report.violation,
        recipient_email=report.recipient_email,
        jurisdiction=JurisdictionOutput(
            state=report.jurisdiction.state,
            city=report.jurisdiction.city,
            email=report.jurisdiction.email,
        ),
        official_citation=citation_to_output(report.citation),
        image=report.image_name,
        email=email_out,
    )
