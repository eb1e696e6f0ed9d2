# fhirproxy/core/__init__.py
"""
Core layer: errors, the FHIR grammar capability and the proxy logic.

No IO on import.
"""
