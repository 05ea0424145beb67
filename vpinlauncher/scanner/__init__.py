"""Table directory scanning and file name normalization."""
