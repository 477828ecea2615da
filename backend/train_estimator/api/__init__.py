"""HTTP API for the train ticket estimator."""
