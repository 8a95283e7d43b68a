"""Pure helpers with no HTTP or filesystem dependencies."""
