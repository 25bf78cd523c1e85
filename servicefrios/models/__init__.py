from servicefrios.models.directory import Client, Technician, Equipment
from servicefrios.models.enums import Frequency, ServiceState, Priority
from servicefrios.models.generation_run import GenerationRun
from servicefrios.models.schedule import Schedule
from servicefrios.models.service_order import ServiceOrder

__all__ = [
    "Client",
    "Technician",
    "Equipment",
    "Frequency",
    "ServiceState",
    "Priority",
    "GenerationRun",
    "Schedule",
    "ServiceOrder"
]
