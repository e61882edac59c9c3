"""
venue_modules -- domain records for the venue.

    venue/      locations, service channels, dayparts, menu items
    sales/      sales and sale lines
    payroll/    payroll periods
    inventory/  inventory snapshots

Each sub-package has ``models.py`` (frozen DTOs, no I/O) and ``orm.py``
(SQLAlchemy persistence with the natural-key unique constraints).
"""
