"""Orders module: checkout validation, order assembly and the order lifecycle."""
