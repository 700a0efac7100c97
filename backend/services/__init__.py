"""Services composing simulation runs with statistics and cost."""
