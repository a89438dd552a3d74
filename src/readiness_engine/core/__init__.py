"""Pure computation core: scoring, gaps, maturity, recommendations, narrative."""
