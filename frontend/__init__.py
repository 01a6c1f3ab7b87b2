"""Chat page client for the Training-aware Chat Relay."""
