"""Startup sequence: optional module loading, database negotiation, route
assembly, frontend selection, background seeding and socket binding."""
