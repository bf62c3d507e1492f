"""Pure helpers shared by services."""
