"""Event-driven notification dispatch service.

Consumes domain events from the broker, resolves recipients and records every
email and in-app delivery attempt in the notification log.
"""
