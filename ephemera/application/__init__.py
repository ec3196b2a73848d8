"""Application layer - server actions composed from domain services."""
