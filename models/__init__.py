"""
models/ - Domain Layer
======================
Plain dataclasses describing subscriptions, plus the immutable query
value used for subscription totals. No I/O lives here.
"""
