class PayrollError(ValueError):
    """Base class for every business-rule failure raised by the engine"""


class InvalidInput(PayrollError):
    """A call argument is out of range (negative amount, zero installments, ...)"""


class InvalidTransition(PayrollError):
    """A status change that the entity's state machine does not allow"""


class InvalidOperation(PayrollError):
    """A structurally valid request that a business rule forbids"""


class InvalidConfiguration(PayrollError):
    """Global payroll settings make the computation impossible"""


class NotFound(InvalidOperation):
    """The referenced entity does not exist in the current snapshot"""
