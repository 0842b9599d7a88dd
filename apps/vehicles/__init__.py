"""Vehicles app package.

Holds the vehicle catalog: listing, vendor submissions and the admin
approval workflow. The availability engine in ``apps.bookings`` reads
this catalog but never writes to it.
"""
