"""Bookings app package.

Owns the booking ledger, the availability engine that answers which
vehicles are free for an interval, and the reservation committer that
records a paid booking without ever double-booking a vehicle.
"""
