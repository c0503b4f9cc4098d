"""HR payroll engine: salary computation, advances and notifications."""

__version__ = "0.1.0"
