"""Face-guided subject cutout and face anonymization."""
