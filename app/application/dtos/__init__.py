"""Application DTOs (no ORM dependency)."""
