"""taskboard: personal task lists with public tasks open for comments."""
