# fhirproxy/cli/__init__.py
"""Command line interface: fhirproxy proxy | convert | validate"""
