"""Local and remote services used by the install and deploy workflows."""
