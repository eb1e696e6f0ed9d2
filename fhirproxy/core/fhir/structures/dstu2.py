# fhirproxy/core/fhir/structures/dstu2.py
"""FHIR DSTU2 (1.0.2) element catalogue."""

from __future__ import annotations

from typing import Dict

from .base import (
    ADDRESS_TYPE,
    ADMINISTRATIVE_GENDER,
    BACKBONE_ELEMENT,
    BASE_RESOURCE,
    BUNDLE_TYPE,
    CONTACT_POINT_USE,
    DOMAIN_RESOURCE,
    ISSUE_SEVERITY,
    NAME_USE,
    NARRATIVE_STATUS,
    QUANTITY_COMPARATOR,
    RESOURCE,
    SEARCH_ENTRY_MODE,
    TypeDef,
    define,
    el,
)


VERSION = "DSTU2"

RESOURCE_NAMES = frozenset({
    "Account", "AllergyIntolerance", "Appointment", "AppointmentResponse",
    "AuditEvent", "Basic", "Binary", "BodySite", "Bundle", "CarePlan", "Claim",
    "ClaimResponse", "ClinicalImpression", "Communication",
    "CommunicationRequest", "Composition", "ConceptMap", "Condition",
    "Conformance", "Contract", "Coverage", "DataElement", "DetectedIssue",
    "Device", "DeviceComponent", "DeviceMetric", "DeviceUseRequest",
    "DeviceUseStatement", "DiagnosticOrder", "DiagnosticReport",
    "DocumentManifest", "DocumentReference", "EligibilityRequest",
    "EligibilityResponse", "Encounter", "EnrollmentRequest",
    "EnrollmentResponse", "EpisodeOfCare", "ExplanationOfBenefit",
    "FamilyMemberHistory", "Flag", "Goal", "Group", "HealthcareService",
    "ImagingObjectSelection", "ImagingStudy", "Immunization",
    "ImmunizationRecommendation", "ImplementationGuide", "List", "Location",
    "Media", "Medication", "MedicationAdministration", "MedicationDispense",
    "MedicationOrder", "MedicationStatement", "MessageHeader", "NamingSystem",
    "NutritionOrder", "Observation", "OperationDefinition", "OperationOutcome",
    "Order", "OrderResponse", "Organization", "Parameters", "Patient",
    "PaymentNotice", "PaymentReconciliation", "Person", "Practitioner",
    "Procedure", "ProcedureRequest", "ProcessRequest", "ProcessResponse",
    "Provenance", "Questionnaire", "QuestionnaireResponse", "ReferralRequest",
    "RelatedPerson", "RiskAssessment", "Schedule", "SearchParameter", "Slot",
    "Specimen", "StructureDefinition", "Subscription", "Substance",
    "SupplyDelivery", "SupplyRequest", "TestScript", "ValueSet",
    "VisionPrescription",
})

OBSERVATION_STATUS = (
    "registered", "preliminary", "final", "amended",
    "cancelled", "entered-in-error", "unknown",
)
OBSERVATION_VALUE = "Quantity|CodeableConcept|string|Range|Ratio|Attachment|time|dateTime|Period"


def _datatypes() -> Dict[str, TypeDef]:
    types = [
        define(
            "Extension",
            el("url", "uri", "1..1"),
            el(
                "value[x]",
                "boolean|integer|decimal|base64Binary|instant|string|uri|date|dateTime|time|code"
                "|oid|id|unsignedInt|positiveInt|markdown|Annotation|Attachment|Identifier"
                "|CodeableConcept|Coding|Quantity|Range|Period|Ratio|HumanName|Address"
                "|ContactPoint|Reference|Meta",
            ),
        ),
        define(
            "Coding",
            el("system", "uri"),
            el("version", "string"),
            el("code", "code"),
            el("display", "string"),
            el("userSelected", "boolean"),
        ),
        define("CodeableConcept", el("coding", "Coding", "0..*"), el("text", "string")),
        define(
            "Identifier",
            el("use", "code", binding=("usual", "official", "temp", "secondary")),
            el("type", "CodeableConcept"),
            el("system", "uri"),
            el("value", "string"),
            el("period", "Period"),
            el("assigner", "Reference"),
        ),
        define(
            "HumanName",
            el("use", "code", binding=NAME_USE),
            el("text", "string"),
            el("family", "string", "0..*"),
            el("given", "string", "0..*"),
            el("prefix", "string", "0..*"),
            el("suffix", "string", "0..*"),
            el("period", "Period"),
        ),
        define(
            "ContactPoint",
            el("system", "code", binding=("phone", "fax", "email", "pager", "other")),
            el("value", "string"),
            el("use", "code", binding=CONTACT_POINT_USE),
            el("rank", "positiveInt"),
            el("period", "Period"),
        ),
        define(
            "Address",
            el("use", "code", binding=("home", "work", "temp", "old")),
            el("type", "code", binding=ADDRESS_TYPE),
            el("text", "string"),
            el("line", "string", "0..*"),
            el("city", "string"),
            el("district", "string"),
            el("state", "string"),
            el("postalCode", "string"),
            el("country", "string"),
            el("period", "Period"),
        ),
        define("Period", el("start", "dateTime"), el("end", "dateTime")),
        define("Reference", el("reference", "string"), el("display", "string")),
        define(
            "Quantity",
            el("value", "decimal"),
            el("comparator", "code", binding=QUANTITY_COMPARATOR),
            el("unit", "string"),
            el("system", "uri"),
            el("code", "code"),
        ),
        define("Range", el("low", "Quantity"), el("high", "Quantity")),
        define("Ratio", el("numerator", "Quantity"), el("denominator", "Quantity")),
        define(
            "Attachment",
            el("contentType", "code"),
            el("language", "code"),
            el("data", "base64Binary"),
            el("url", "uri"),
            el("size", "unsignedInt"),
            el("hash", "base64Binary"),
            el("title", "string"),
            el("creation", "dateTime"),
        ),
        define(
            "Annotation",
            el("author[x]", "Reference|string"),
            el("time", "dateTime"),
            el("text", "string", "1..1"),
        ),
        define(
            "Narrative",
            el("status", "code", "1..1", binding=NARRATIVE_STATUS),
            el("div", "xhtml", "1..1"),
        ),
        define(
            "Meta",
            el("versionId", "id"),
            el("lastUpdated", "instant"),
            el("profile", "uri", "0..*"),
            el("security", "Coding", "0..*"),
            el("tag", "Coding", "0..*"),
        ),
    ]
    return {t.name: t for t in types}


def _resources() -> Dict[str, TypeDef]:
    types = [
        # ---- Patient ----
        define(
            "Patient",
            el("identifier", "Identifier", "0..*"),
            el("active", "boolean"),
            el("name", "HumanName", "0..*"),
            el("telecom", "ContactPoint", "0..*"),
            el("gender", "code", binding=ADMINISTRATIVE_GENDER),
            el("birthDate", "date"),
            el("deceased[x]", "boolean|dateTime"),
            el("address", "Address", "0..*"),
            el("maritalStatus", "CodeableConcept"),
            el("multipleBirth[x]", "boolean|integer"),
            el("photo", "Attachment", "0..*"),
            el("contact", "Patient.contact", "0..*"),
            el("animal", "Patient.animal"),
            el("communication", "Patient.communication", "0..*"),
            el("careProvider", "Reference", "0..*"),
            el("managingOrganization", "Reference"),
            el("link", "Patient.link", "0..*"),
            base=DOMAIN_RESOURCE,
        ),
        define(
            "Patient.contact",
            el("relationship", "CodeableConcept", "0..*"),
            el("name", "HumanName"),
            el("telecom", "ContactPoint", "0..*"),
            el("address", "Address"),
            el("gender", "code", binding=ADMINISTRATIVE_GENDER),
            el("organization", "Reference"),
            el("period", "Period"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Patient.animal",
            el("species", "CodeableConcept", "1..1"),
            el("breed", "CodeableConcept"),
            el("genderStatus", "CodeableConcept"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Patient.communication",
            el("language", "CodeableConcept", "1..1"),
            el("preferred", "boolean"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Patient.link",
            el("other", "Reference", "1..1"),
            el("type", "code", "1..1", binding=("replace", "refer", "seealso")),
            base=BACKBONE_ELEMENT,
        ),
        # ---- Practitioner ----
        define(
            "Practitioner",
            el("identifier", "Identifier", "0..*"),
            el("active", "boolean"),
            el("name", "HumanName"),
            el("telecom", "ContactPoint", "0..*"),
            el("address", "Address", "0..*"),
            el("gender", "code", binding=ADMINISTRATIVE_GENDER),
            el("birthDate", "date"),
            el("photo", "Attachment", "0..*"),
            el("practitionerRole", "Practitioner.practitionerRole", "0..*"),
            el("qualification", "Practitioner.qualification", "0..*"),
            el("communication", "CodeableConcept", "0..*"),
            base=DOMAIN_RESOURCE,
        ),
        define(
            "Practitioner.practitionerRole",
            el("managingOrganization", "Reference"),
            el("role", "CodeableConcept"),
            el("specialty", "CodeableConcept", "0..*"),
            el("period", "Period"),
            el("location", "Reference", "0..*"),
            el("healthcareService", "Reference", "0..*"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Practitioner.qualification",
            el("identifier", "Identifier", "0..*"),
            el("code", "CodeableConcept", "1..1"),
            el("period", "Period"),
            el("issuer", "Reference"),
            base=BACKBONE_ELEMENT,
        ),
        # ---- Organization ----
        define(
            "Organization",
            el("identifier", "Identifier", "0..*"),
            el("active", "boolean"),
            el("type", "CodeableConcept"),
            el("name", "string"),
            el("telecom", "ContactPoint", "0..*"),
            el("address", "Address", "0..*"),
            el("partOf", "Reference"),
            el("contact", "Organization.contact", "0..*"),
            base=DOMAIN_RESOURCE,
        ),
        define(
            "Organization.contact",
            el("purpose", "CodeableConcept"),
            el("name", "HumanName"),
            el("telecom", "ContactPoint", "0..*"),
            el("address", "Address"),
            base=BACKBONE_ELEMENT,
        ),
        # ---- Observation ----
        define(
            "Observation",
            el("identifier", "Identifier", "0..*"),
            el("status", "code", "1..1", binding=OBSERVATION_STATUS),
            el("category", "CodeableConcept"),
            el("code", "CodeableConcept", "1..1"),
            el("subject", "Reference"),
            el("encounter", "Reference"),
            el("effective[x]", "dateTime|Period"),
            el("issued", "instant"),
            el("performer", "Reference", "0..*"),
            el("value[x]", OBSERVATION_VALUE),
            el("dataAbsentReason", "CodeableConcept"),
            el("interpretation", "CodeableConcept"),
            el("comments", "string"),
            el("bodySite", "CodeableConcept"),
            el("method", "CodeableConcept"),
            el("specimen", "Reference"),
            el("device", "Reference"),
            el("referenceRange", "Observation.referenceRange", "0..*"),
            el("related", "Observation.related", "0..*"),
            el("component", "Observation.component", "0..*"),
            base=DOMAIN_RESOURCE,
        ),
        define(
            "Observation.referenceRange",
            el("low", "Quantity"),
            el("high", "Quantity"),
            el("meaning", "CodeableConcept"),
            el("age", "Range"),
            el("text", "string"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Observation.related",
            el("type", "code", binding=(
                "has-member", "derived-from", "sequel-to",
                "replaces", "qualified-by", "interfered-by",
            )),
            el("target", "Reference", "1..1"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Observation.component",
            el("code", "CodeableConcept", "1..1"),
            el("value[x]", OBSERVATION_VALUE),
            el("dataAbsentReason", "CodeableConcept"),
            el("referenceRange", "Observation.referenceRange", "0..*"),
            base=BACKBONE_ELEMENT,
        ),
        # ---- Bundle ----
        define(
            "Bundle",
            el("type", "code", "1..1", binding=BUNDLE_TYPE),
            el("total", "unsignedInt"),
            el("link", "Bundle.link", "0..*"),
            el("entry", "Bundle.entry", "0..*"),
            base=BASE_RESOURCE,
        ),
        define(
            "Bundle.link",
            el("relation", "string", "1..1"),
            el("url", "uri", "1..1"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Bundle.entry",
            el("link", "Bundle.link", "0..*"),
            el("fullUrl", "uri"),
            el("resource", RESOURCE),
            el("search", "Bundle.entry.search"),
            el("request", "Bundle.entry.request"),
            el("response", "Bundle.entry.response"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Bundle.entry.search",
            el("mode", "code", binding=SEARCH_ENTRY_MODE),
            el("score", "decimal"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Bundle.entry.request",
            el("method", "code", "1..1", binding=("GET", "POST", "PUT", "DELETE")),
            el("url", "uri", "1..1"),
            el("ifNoneMatch", "string"),
            el("ifModifiedSince", "instant"),
            el("ifMatch", "string"),
            el("ifNoneExist", "string"),
            base=BACKBONE_ELEMENT,
        ),
        define(
            "Bundle.entry.response",
            el("status", "string", "1..1"),
            el("location", "uri"),
            el("etag", "string"),
            el("lastModified", "instant"),
            base=BACKBONE_ELEMENT,
        ),
        # ---- OperationOutcome ----
        define(
            "OperationOutcome",
            el("issue", "OperationOutcome.issue", "1..*"),
            base=DOMAIN_RESOURCE,
        ),
        define(
            "OperationOutcome.issue",
            el("severity", "code", "1..1", binding=ISSUE_SEVERITY),
            el("code", "code", "1..1"),
            el("details", "CodeableConcept"),
            el("diagnostics", "string"),
            el("location", "string", "0..*"),
            base=BACKBONE_ELEMENT,
        ),
    ]
    return {t.name: t for t in types}


def build_definitions() -> Dict[str, TypeDef]:
    definitions = _datatypes()
    definitions.update(_resources())
    return definitions
