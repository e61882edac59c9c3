"""
ORM Registry (``venue_modules._orm_registry``).

Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table before ``create_tables()`` runs.  Scripts, the worker
and ``tests/conftest.py`` all go through ``create_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ORM module.  Idempotent -- repeated calls are harmless."""
    # Reference tables first; sales/payroll/inventory reference locations.
    # fmt: off
    import venue_modules.venue.orm  # noqa: F401
    import venue_modules.sales.orm  # noqa: F401
    import venue_modules.payroll.orm  # noqa: F401
    import venue_modules.inventory.orm  # noqa: F401
    import venue_ingestion.models  # noqa: F401  # import jobs, anomalies, mapping profiles
    import venue_reporting.models  # noqa: F401  # KPI aggregates
