from app.schemas.appointment import (
    AppointmentBase,
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from app.schemas.auth import LoginRequest, RoleRead, TokenResponse, UserRead
from app.schemas.availability import (
    AvailabilityBase,
    AvailabilityCreate,
    AvailabilityRead,
    AvailabilityUpdate,
)
from app.schemas.common import Pagination
from app.schemas.directory import (
    LocationCreate,
    LocationRead,
    PatientCreate,
    PatientRead,
    ProviderCreate,
    ProviderRead,
)
