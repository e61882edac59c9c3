"""Pure KPI arithmetic and reporting DTOs.  ZERO I/O."""
