"""
Application wiring: lifespan handling.
"""
