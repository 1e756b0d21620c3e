from .budget import BudgetService
from .export import ExportFormat, ExportService
from .provisioning import ProvisioningService
from .reconciler import TransactionReconciler
from .summary import (
    MonthlyTotals,
    SpendingEstimate,
    SpendingForecast,
    SummaryService,
)

__all__ = [
    "BudgetService",
    "ExportFormat",
    "ExportService",
    "MonthlyTotals",
    "ProvisioningService",
    "SpendingEstimate",
    "SpendingForecast",
    "SummaryService",
    "TransactionReconciler",
]
