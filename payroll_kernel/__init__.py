"""
Payroll Kernel

Shared foundation for the statutory payroll engine:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Decimal money helpers with explicit rounding
"""

__version__ = "0.1.0"
