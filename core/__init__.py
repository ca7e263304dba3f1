"""
Core module for shared domain infrastructure.

This module contains:
- Domain value objects, exceptions and the clock
- Middleware components
- Metrics, tracing and health views
"""
