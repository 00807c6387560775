"""Payment attempt aggregate and reconciliation rules."""
