from app.services import security
from app.services.appointments import (
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    update_appointment,
    update_appointment_status,
)
from app.services.auth import (
    AuthenticationError,
    authenticate_user,
    create_access_token_for_user,
    create_user,
    ensure_seed_data,
)
from app.services.availability import (
    create_availability,
    delete_availability,
    get_availability,
    list_availability,
    provider_scope,
    update_availability,
)
from app.services.directory import (
    archive_patient,
    archive_provider,
    create_location,
    create_patient,
    create_provider,
    deactivate_location,
    get_location,
    get_patient,
    get_provider,
    list_locations,
    list_patients,
    list_providers,
)

__all__ = [
    "security",
    "AuthenticationError",
    "authenticate_user",
    "create_access_token_for_user",
    "create_user",
    "ensure_seed_data",
    "create_appointment",
    "delete_appointment",
    "get_appointment",
    "list_appointments",
    "update_appointment",
    "update_appointment_status",
    "create_availability",
    "delete_availability",
    "get_availability",
    "list_availability",
    "provider_scope",
    "update_availability",
    "archive_patient",
    "archive_provider",
    "create_location",
    "create_patient",
    "create_provider",
    "deactivate_location",
    "get_location",
    "get_patient",
    "get_provider",
    "list_locations",
    "list_patients",
    "list_providers",
]
