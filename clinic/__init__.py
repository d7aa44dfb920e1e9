"""
Clinic Scheduling Service

A FastAPI-based clinic backend: patient, doctor and admin accounts,
appointment booking against doctor availability with conflict detection,
and prescriptions linked to appointments.
"""

__version__ = "1.0.0"
