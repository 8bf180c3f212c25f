"""Pog flipping game: rules engine plus local API and terminal hosts."""
