"""Analysis pipeline stages."""
