"""Local Brands: turn a product photo into a published one-page website."""
