"""Built-in sub-command groups for the clink CLI."""
