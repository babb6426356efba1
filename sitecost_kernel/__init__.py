"""
Site Cost Kernel

Shared foundation for construction-site cost reporting:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with request-scoped context
- Decimal-only Money values with explicit display rounding
- Immutable material activity and labor entities
"""

__version__ = "0.1.0"
