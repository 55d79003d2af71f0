"""
Core domain models, contracts, and observability.

This module contains the foundational building blocks that are independent
of the host environment (balances, external calls, event delivery).
"""
