from app.models.appointment import Appointment
from app.models.availability import Availability
from app.models.directory import Location, Patient, Provider
from app.models.user import Role, User
