"""Core domain: models, selectors, search and detection."""
