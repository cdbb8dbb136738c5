"""Host adapters for the navigation engine."""
