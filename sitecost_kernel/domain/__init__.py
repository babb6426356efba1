"""
Pure domain layer.

Immutable value objects and entities with NO dependencies on I/O, network
or the wall clock (except the injectable SystemClock).
"""

from sitecost_kernel.domain.activities import (
    ActivityKind,
    ActivityUser,
    CostSource,
    LaborEntry,
    MaterialActivity,
    MaterialLineItem,
    ProjectRef,
    TransferDetails,
)
from sitecost_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from sitecost_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from sitecost_kernel.domain.values import Currency, Money

__all__ = [
    "ActivityKind",
    "ActivityUser",
    "Clock",
    "CostSource",
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "DeterministicClock",
    "LaborEntry",
    "MaterialActivity",
    "MaterialLineItem",
    "Money",
    "ProjectRef",
    "SystemClock",
    "TransferDetails",
]
