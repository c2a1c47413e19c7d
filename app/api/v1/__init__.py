"""Feature route registrars.

Each module exposes a `register_*_routes` function. The startup sequence
imports these modules individually so a missing or broken one only disables
its own routes; do not import them from here.
"""
