"""Release version parsing, ordering and catalog resolution."""
