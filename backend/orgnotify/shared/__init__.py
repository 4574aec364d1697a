"""Building blocks shared between modules."""
