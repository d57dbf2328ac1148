"""Rule evaluation engine: index, formatter, comment sync, fixes and reporting."""
