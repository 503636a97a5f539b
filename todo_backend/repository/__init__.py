"""Repository layer: pooled SQLite access.

executor.QueryExecutor leases one connection per statement,
transaction.TransactionExecutor holds one connection across a transaction,
and the *_repo modules keep the table-specific SQL out of services.
"""
