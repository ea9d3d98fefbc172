"""User account management service: signup, list, fetch and delete users."""
