"""
Pure calculation engines for the stock ledger.

Nothing in this package opens a session or reads the clock: the FIFO
allocator and the report builders take snapshots and return frozen results.
"""
