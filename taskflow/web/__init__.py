"""HTTP trigger surface for the scheduler."""
