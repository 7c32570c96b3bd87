"""Report writers for staging results."""
