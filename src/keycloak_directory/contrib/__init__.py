"""Optional integrations (dependency-injector container)."""
