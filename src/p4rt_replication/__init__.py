"""p4rt-replication - packet replication table translation and reconciliation."""

__version__ = "0.1.0"
