"""
Shared Kernel

Framework-light building blocks reused by every RentARide domain app:
entities and aggregates that record domain events, common value objects,
and the application-level unit of work and message bus.
"""
