from app.api.v1 import appointments, auth, availability, locations, patients, providers

__all__ = [
    "auth",
    "appointments",
    "availability",
    "patients",
    "providers",
    "locations",
]
