"""Payroll records."""
