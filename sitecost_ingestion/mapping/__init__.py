"""Raw record to domain entity mapping."""
