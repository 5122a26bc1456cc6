"""Event registration and badge check-in service.

Entry point: :func:`checkin_system.main.create_app`.
"""
