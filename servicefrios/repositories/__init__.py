from servicefrios.repositories.directory import ClientRepository, TechnicianRepository
from servicefrios.repositories.runs import GenerationRunRepository
from servicefrios.repositories.schedules import ScheduleRepository
from servicefrios.repositories.service_orders import ServiceOrderRepository, ServiceOrderTransaction

__all__ = [
    "ClientRepository",
    "TechnicianRepository",
    "GenerationRunRepository",
    "ScheduleRepository",
    "ServiceOrderRepository",
    "ServiceOrderTransaction"
]
