"""Ingestion layer.

Adapters that turn raw rtlamr lines and historical query results into typed
messages and rows, and that project reconciled state into output points.
"""

__all__: list[str] = []
