"""Facebook login, page listing and post forwarding service."""
