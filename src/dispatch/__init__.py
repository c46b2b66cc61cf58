"""
Driver-to-order dispatch over a road network.

Quick start:
    from src.dispatch import optimize_delivery
    plan = optimize_delivery(inputs, use_cache=True)
    for delivery in plan.deliveries:
        print(delivery.to_dict())
"""

from src.dispatch.config import DispatchConfig, load_config
from src.dispatch.engine import DeliveryPlan, DispatchEngine, RunSummary, optimize_delivery
from src.dispatch.loader import InputValidationError, validate_inputs
from src.dispatch.models import Assignment, Driver, Order
from src.dispatch.planner import GreedyPlanner, PlanResult, assign_drivers_to_orders
from src.dispatch.summarizer import RouteSummary, summarize_route

__all__ = [
    "DispatchConfig",
    "load_config",
    "DeliveryPlan",
    "DispatchEngine",
    "RunSummary",
    "optimize_delivery",
    "InputValidationError",
    "validate_inputs",
    "Assignment",
    "Driver",
    "Order",
    "GreedyPlanner",
    "PlanResult",
    "assign_drivers_to_orders",
    "RouteSummary",
    "summarize_route",
]
