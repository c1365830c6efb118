"""Budget-vs-actual tracking."""
