"""Pure import-domain types, parsed values and validators.  ZERO I/O."""
