"""
Test suite for the Clinic Scheduling Service.

Contains unit tests for the scheduling core and API tests for the routers.
"""
