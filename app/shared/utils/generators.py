"""Primary key generator (CUID2) shared by every tenant and master model."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """New collision-resistant id for a row."""
    return str(cuid_generator())
