"""Train ticket price estimation."""
