"""Infrastructure adapters: database, email provider and broker."""
