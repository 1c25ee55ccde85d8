"""
Payroll Kernel - shared infrastructure for the payroll engines.

- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock for deterministic time
- Decimal coercion and money rounding
"""

__version__ = "0.1.0"
