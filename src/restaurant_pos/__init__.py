"""Restaurant point-of-service backend: menu and order management API."""
