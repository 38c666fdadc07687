"""Web API for provinces and administrative units."""
