"""Application layer: event routing, domain handlers and delivery channels."""
