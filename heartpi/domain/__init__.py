"""Domain models, errors and result types, free of I/O."""
