"""
Adapters to the outside world: flat-file record store, vitals log and mail.

Each adapter implements a protocol the services depend on, so tests can swap
in in-memory doubles.
"""
