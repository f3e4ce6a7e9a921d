"""HTTP surface for the route locator."""
