"""Pure domain helpers: time and workflow value objects."""
