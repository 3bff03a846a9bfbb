"""HTTP surface over the core business-registry logic."""
