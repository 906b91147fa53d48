"""UI testing: self-healing framework and page objects."""
