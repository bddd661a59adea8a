"""
CareHub

A FastAPI service for role-based healthcare management: patients book
appointments with doctors, doctors manage their schedule and administrators
manage users and roles.
"""

__version__ = "1.0.0"
