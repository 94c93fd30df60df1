"""Utility modules for the SOAP-UI engine."""
