from servicefrios.routers.schedules import router as schedules_router
from servicefrios.routers.service_orders import router as service_orders_router
from servicefrios.routers.runs import router as runs_router

__all__ = ["schedules_router", "service_orders_router", "runs_router"]
