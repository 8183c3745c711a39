"""Clinic application for the CareTag backend.

This package contains models, serializers, services, views and route
registrations implementing the API contract expected by the CareTag
front-end.
"""
