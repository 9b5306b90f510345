"""HTTP layer: versioned routers and error translation."""
