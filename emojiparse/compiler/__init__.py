"""Build-time compiler: emoji table -> one matching pattern."""
