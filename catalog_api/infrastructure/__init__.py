"""Infrastructure: configuration, logging, database and object storage."""
