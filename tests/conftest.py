"""
Shared fixtures: FHIR contexts and the resource files under tests/fixtures/.
"""

import json
from pathlib import Path

import pytest

from fhirproxy.core.fhir import FhirContext


FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def anyio_backend():
    # asyncio backend only (trio is not installed)
    return "asyncio"


@pytest.fixture
def fixture_text():
    """Read a file from tests/fixtures/"""
    def _read(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")
    return _read


@pytest.fixture
def r4_context():
    return FhirContext.for_version("R4")


@pytest.fixture
def dstu2_context():
    return FhirContext.for_version("DSTU2")


@pytest.fixture
def patient_json(fixture_text):
    return fixture_text("patient.json")


@pytest.fixture
def patient_xml(fixture_text):
    return fixture_text("patient.xml")


@pytest.fixture
def patient_resource(patient_json):
    return json.loads(patient_json)


# Past the default int/str digit limit of current interpreters (4300)
HUGE_INTEGER = "9" * 5000


@pytest.fixture
def huge_integer_json():
    return '{"resourceType":"Patient","multipleBirthInteger":%s}' % HUGE_INTEGER


@pytest.fixture
def huge_integer_xml():
    return '<Patient xmlns="http://hl7.org/fhir"><multipleBirthInteger value="%s"/></Patient>' % HUGE_INTEGER


@pytest.fixture
def deeply_nested_json():
    depth = 200000
    return '{"resourceType":"Patient","extension":' + "[" * depth + "]" * depth + "}"


@pytest.fixture
def deeply_nested_xml():
    depth = 5000
    return (
        '<Patient xmlns="http://hl7.org/fhir">'
        + '<extension url="http://example.org/nested">' * depth
        + "</extension>" * depth
        + "</Patient>"
    )
