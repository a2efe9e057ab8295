"""Remote sources of FASTA records."""
