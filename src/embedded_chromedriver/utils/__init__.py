"""Archive fetching and local network helpers."""
