"""Core building blocks of the log upload pipeline."""
