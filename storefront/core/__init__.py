"""Cross-cutting building blocks: exceptions, logging, clock."""
