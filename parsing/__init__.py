"""Tree transformations that turn a page into its reading view."""
