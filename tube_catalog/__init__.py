"""Video catalog backend: teachers, uploaded videos and teacher requests."""
