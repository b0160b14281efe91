"""Clubhouse collaborators: course data over HTTP and match persistence."""
