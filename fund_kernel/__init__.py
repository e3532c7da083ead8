"""
Fund Kernel

Shared foundation for the political fund report compiler:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock for deterministic timestamps
- Validation result DTOs
"""

__version__ = "0.1.0"
