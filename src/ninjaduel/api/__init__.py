"""HTTP surface for the duel service."""
