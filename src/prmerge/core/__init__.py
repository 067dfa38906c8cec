"""Core logic for prmerge: discovery, branch setup and the merge engine."""
