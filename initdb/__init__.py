"""One-shot MongoDB bootstrap for the PN registry service."""
