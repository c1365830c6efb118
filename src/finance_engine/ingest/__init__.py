"""Raw snapshot loading."""
