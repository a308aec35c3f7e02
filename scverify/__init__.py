"""SC-graph construction and Boogie commutativity checks for hop-based programs."""

__version__ = "0.1.0"