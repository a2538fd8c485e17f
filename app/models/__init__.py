# app/models/__init__.py
from .base import Base
from .business import Business
from .service import Service
from .availability import OperatingHourRule
from .auth_credential import AuthCredential
from .appointment import Appointment

__all__ = [
    "Base",
    "Business",
    "Service",
    "OperatingHourRule",
    "AuthCredential",
    "Appointment",
]
