"""TaskFlow — personal task tracker with scheduled email digests."""
