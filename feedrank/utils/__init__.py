"""
Utility modules for feedrank.

Cross-cutting concerns:
- Time: Timestamp parsing and age arithmetic
- Logging: Application logging setup
"""
