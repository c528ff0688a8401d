"""Earth frame, TLE generation and orbital propagators."""
