"""Infrastructure layer: ports and Keycloak adapters."""
