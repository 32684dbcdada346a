"""Calendar-facing pieces: models, day keys, week windows, Google fetcher and auth."""
