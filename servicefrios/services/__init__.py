from servicefrios.services.recurrence import next_occurrence, iter_occurrences, validate_recurrence
from servicefrios.services.materializer import OccurrenceMaterializer, MaterializeResult
from servicefrios.services.scanner import ScheduleScanner, ScanResult
from servicefrios.services.schedules import ScheduleService
from servicefrios.services.generation import generate_services

__all__ = [
    "next_occurrence",
    "iter_occurrences",
    "validate_recurrence",
    "OccurrenceMaterializer",
    "MaterializeResult",
    "ScheduleScanner",
    "ScanResult",
    "ScheduleService",
    "generate_services"
]
