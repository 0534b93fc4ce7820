"""Domain layer for ledgerkit application."""

_SERVICES = {
    "TransactionService": "ledgerkit.domain.transaction",
    "JournalService": "ledgerkit.domain.journal",
    "AdjustmentService": "ledgerkit.domain.adjustments",
    "ReportService": "ledgerkit.domain.reports",
    "TemplateService": "ledgerkit.domain.templates",
}

__all__ = list(_SERVICES)


# Services import the database layer, which imports domain entities; resolve
# them lazily so that importing ledgerkit.domain.entities stays cycle-free.
def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
